"""Store interfaces for the two analysis caches."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from reposcope.cache.models import (
    RepositoryAnalysis,
    RepositoryAnalysisSummary,
    RouteAnalysisEntry,
)
from reposcope.identity import RepositoryIdentity


@runtime_checkable
class RepositoryAnalysisStore(Protocol):
    """Keyed by repository identity. ``get`` returns None on absence."""

    def get(self, identity: RepositoryIdentity) -> RepositoryAnalysis | None: ...

    def summary(self, identity: RepositoryIdentity) -> RepositoryAnalysisSummary | None: ...

    def upsert(self, analysis: RepositoryAnalysis) -> None: ...


@runtime_checkable
class RouteAnalysisStore(Protocol):
    """Keyed by (repository identity, route path); independent of the above."""

    def get(self, identity: RepositoryIdentity, route: str) -> RouteAnalysisEntry | None: ...

    def upsert(self, entry: RouteAnalysisEntry) -> None: ...
