"""Wiring shared by the CLI and the HTTP service."""

from __future__ import annotations

from dataclasses import dataclass

from reposcope.cache.sqlite_store import open_stores
from reposcope.config.models import RepoScopeConfig
from reposcope.identity import DEFAULT_HOST
from reposcope.llm.pool import create_client_pool
from reposcope.orchestrator.repository import HostFactory, RepositoryAnalyzer
from reposcope.orchestrator.route import RouteAnalyzer
from reposcope.vcs import create_source_host
from reposcope.vcs.base import SourceHost


@dataclass
class AppContext:
    repository_analyzer: RepositoryAnalyzer
    route_analyzer: RouteAnalyzer
    host_factory: HostFactory
    repo_host: str = DEFAULT_HOST


def build_context(config: RepoScopeConfig) -> AppContext:
    """Construct the pool, stores and orchestrators once.

    Raises ValueError when the primary model credential is not set.
    """
    pool = create_client_pool(config.llm)
    repository_store, route_store = open_stores(config.cache.path)

    def host_factory(token: str | None) -> SourceHost:
        return create_source_host(config.vcs, token)

    return AppContext(
        repository_analyzer=RepositoryAnalyzer(
            host_factory, pool, repository_store, config.vcs.host
        ),
        route_analyzer=RouteAnalyzer(
            host_factory, pool, repository_store, route_store, config.vcs.host
        ),
        host_factory=host_factory,
        repo_host=config.vcs.host,
    )
