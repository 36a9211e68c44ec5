"""Whole-repository analysis: evidence, architecture and route catalog."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from reposcope.analysis.sections import analyze_architecture, analyze_routes
from reposcope.cache.base import RepositoryAnalysisStore
from reposcope.cache.models import (
    LLMAnalysis,
    RepositoryAnalysis,
    RepositoryAnalysisSummary,
)
from reposcope.errors import (
    AnalysisFailedError,
    UpstreamNotFoundError,
    UpstreamRateLimitedError,
)
from reposcope.evidence.assembler import EvidenceAssembler
from reposcope.identity import DEFAULT_HOST, parse_repository_url
from reposcope.llm.pool import LLMClientPool
from reposcope.vcs.base import SourceHost

logger = logging.getLogger(__name__)

HostFactory = Callable[[str | None], SourceHost]


@dataclass(frozen=True)
class AnalysisResult:
    cached: bool
    analysis: RepositoryAnalysis


class RepositoryAnalyzer:
    """Validate, read cache, assemble evidence, run both analyses, upsert.

    ``host_factory`` binds a source host to the caller's credential.
    Upstream not-found and rate-limited errors propagate unchanged; any
    other failure is logged and re-raised as AnalysisFailedError.
    """

    def __init__(
        self,
        host_factory: HostFactory,
        pool: LLMClientPool,
        store: RepositoryAnalysisStore,
        repo_host: str = DEFAULT_HOST,
    ) -> None:
        self.host_factory = host_factory
        self.pool = pool
        self.store = store
        self.repo_host = repo_host

    async def analyze(
        self, repo_url: str, token: str | None = None, force_refresh: bool = False
    ) -> AnalysisResult:
        identity = parse_repository_url(repo_url, self.repo_host)

        if force_refresh:
            logger.info("Force refresh for %s, bypassing cache", identity)
        else:
            cached = await asyncio.to_thread(self.store.get, identity)
            if cached is not None:
                logger.info("Cache hit for %s", identity)
                return AnalysisResult(cached=True, analysis=cached)
            logger.info("Cache miss for %s, running analysis", identity)

        try:
            evidence = await EvidenceAssembler(self.host_factory(token)).assemble(identity)
            llm = self.pool.heavy()
            architecture, routes = await asyncio.gather(
                analyze_architecture(
                    llm, evidence.file_tree, evidence.tech_stack, evidence.key_files
                ),
                analyze_routes(
                    llm, evidence.key_files, evidence.file_tree, evidence.tech_stack
                ),
            )
            analysis = RepositoryAnalysis(
                repo_url=identity.url,
                owner=identity.owner,
                name=identity.name,
                metadata=evidence.metadata,
                commits=evidence.commits,
                contributors=evidence.contributors,
                repo_status=evidence.repo_status,
                tech_stack=evidence.tech_stack,
                file_tree=evidence.file_tree,
                key_file_contents=evidence.key_files,
                llm_analysis=LLMAnalysis(
                    overall_flow=architecture.value.overall_flow,
                    architecture_diagram=architecture.value.architecture_diagram,
                    routes=routes.value,
                ),
            )
            await asyncio.to_thread(self.store.upsert, analysis)
        except (UpstreamNotFoundError, UpstreamRateLimitedError):
            raise
        except Exception as e:
            logger.exception("Analysis of %s failed", identity)
            raise AnalysisFailedError(f"Analysis failed: {e}") from e

        logger.info(
            "Saved analysis for %s (%d routes)", identity, len(analysis.llm_analysis.routes)
        )
        return AnalysisResult(cached=False, analysis=analysis)

    def check(self, repo_url: str) -> RepositoryAnalysisSummary | None:
        """Existence check; never triggers an analysis."""
        return self.store.summary(parse_repository_url(repo_url, self.repo_host))
