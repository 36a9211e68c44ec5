"""Single-route deep dive: relevance, full-file fetch, trace, snippets."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Literal

from reposcope.analysis.sections import analyze_route_trace, identify_relevant_files
from reposcope.cache.base import RepositoryAnalysisStore, RouteAnalysisStore
from reposcope.cache.models import RepositoryAnalysis, RouteAnalysisEntry
from reposcope.codec.models import ParsedExecutionStep, RouteTrace
from reposcope.codec.prompts import format_codebase
from reposcope.codec.references import resolve_source_references
from reposcope.codec.steps import parse_execution_steps
from reposcope.errors import (
    AnalysisFailedError,
    InputInvalidError,
    RepositoryNotAnalyzedError,
)
from reposcope.evidence.key_files import fetch_files
from reposcope.identity import DEFAULT_HOST, RepositoryIdentity, parse_repository_url
from reposcope.llm.pool import LLMClientPool
from reposcope.llm.rate_limit import call_with_rate_limit_retry
from reposcope.orchestrator.repository import HostFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteAnalysisOutcome:
    """``completed`` with a trace, or ``rate_limit_exhausted`` with none."""

    status: Literal["completed", "rate_limit_exhausted"]
    cached: bool = False
    result: RouteTrace | None = None
    steps: list[ParsedExecutionStep] = field(default_factory=list)

    @classmethod
    def completed(cls, result: RouteTrace, cached: bool) -> RouteAnalysisOutcome:
        return cls(
            status="completed",
            cached=cached,
            result=result,
            steps=parse_execution_steps(result.execution_trace),
        )

    @classmethod
    def exhausted(cls) -> RouteAnalysisOutcome:
        return cls(status="rate_limit_exhausted")

    @property
    def is_exhausted(self) -> bool:
        return self.status == "rate_limit_exhausted"


class RouteAnalyzer:
    """Deep analysis of one route of an already-analyzed repository.

    Never triggers a repository analysis; raises RepositoryNotAnalyzedError
    instead. Relevance calls go to ``pool.light(route_index)``, trace calls
    to ``pool.heavy()``; both are rate-limit protected.
    """

    def __init__(
        self,
        host_factory: HostFactory,
        pool: LLMClientPool,
        repository_store: RepositoryAnalysisStore,
        route_store: RouteAnalysisStore,
        repo_host: str = DEFAULT_HOST,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.host_factory = host_factory
        self.pool = pool
        self.repository_store = repository_store
        self.route_store = route_store
        self.repo_host = repo_host
        self._sleep = sleep

    async def analyze(
        self,
        repo_url: str,
        route: str,
        route_index: int = 0,
        token: str | None = None,
        force_reload: bool = False,
    ) -> RouteAnalysisOutcome:
        identity = parse_repository_url(repo_url, self.repo_host)
        if not route or not route.strip():
            raise InputInvalidError("repoUrl and route are required.")

        if force_reload:
            logger.info("Force reload for %s %s, bypassing cache", identity, route)
        else:
            entry = await asyncio.to_thread(self.route_store.get, identity, route)
            if entry is not None and entry.is_complete:
                logger.info("Route cache hit for %s %s", identity, route)
                return RouteAnalysisOutcome.completed(
                    RouteTrace(
                        flow_visualization=entry.flow_visualization,
                        execution_trace=entry.execution_trace,
                    ),
                    cached=True,
                )
            logger.info("Route cache miss for %s %s", identity, route)

        repo = await asyncio.to_thread(self.repository_store.get, identity)
        if repo is None:
            raise RepositoryNotAnalyzedError(
                "Repository not analyzed yet. Run the general analysis first."
            )

        try:
            return await self._run(identity, route, route_index, token, repo)
        except Exception as e:
            logger.exception("Route analysis of %s %s failed", identity, route)
            raise AnalysisFailedError(f"Route analysis failed: {e}") from e

    async def _run(
        self,
        identity: RepositoryIdentity,
        route: str,
        route_index: int,
        token: str | None,
        repo: RepositoryAnalysis,
    ) -> RouteAnalysisOutcome:
        file_paths = [item.path for item in repo.file_tree] or [
            f.path for f in repo.key_file_contents
        ]

        relevance = await call_with_rate_limit_retry(
            lambda: identify_relevant_files(self.pool.light(route_index), route, file_paths),
            label="route relevance",
            sleep=self._sleep,
        )
        if relevance.is_exhausted:
            return RouteAnalysisOutcome.exhausted()
        relevant_paths = relevance.value.value

        fresh_files = []
        if relevant_paths:
            host = self.host_factory(token)
            fresh_files = await fetch_files(host, identity, relevant_paths)
        codebase = format_codebase(fresh_files, "FULL FILE")
        if not codebase.strip():
            logger.info("No fresh files for %s %s, using cached key files", identity, route)
            fresh_files = []
            codebase = format_codebase(repo.key_file_contents, "CACHED FILE")

        traced = await call_with_rate_limit_retry(
            lambda: analyze_route_trace(self.pool.heavy(), route, codebase),
            label="route trace",
            sleep=self._sleep,
        )
        if traced.is_exhausted:
            return RouteAnalysisOutcome.exhausted()
        trace = traced.value.value

        result = trace.model_copy(
            update={
                "execution_trace": resolve_source_references(
                    trace.execution_trace, fresh_files, repo.key_file_contents
                )
            }
        )
        entry = RouteAnalysisEntry(
            owner=identity.owner,
            name=identity.name,
            route=route,
            flow_visualization=result.flow_visualization,
            execution_trace=result.execution_trace,
        )
        await asyncio.to_thread(self.route_store.upsert, entry)
        logger.info("Saved route analysis for %s %s", identity, route)
        return RouteAnalysisOutcome.completed(result, cached=False)
