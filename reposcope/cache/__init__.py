"""Repository-level and route-level analysis caches."""

from reposcope.cache.base import RepositoryAnalysisStore, RouteAnalysisStore
from reposcope.cache.models import (
    LLMAnalysis,
    RepositoryAnalysis,
    RepositoryAnalysisSummary,
    RouteAnalysisEntry,
)
from reposcope.cache.sqlite_store import SQLiteRepositoryStore, SQLiteRouteStore, open_stores

__all__ = [
    "LLMAnalysis",
    "RepositoryAnalysis",
    "RepositoryAnalysisStore",
    "RepositoryAnalysisSummary",
    "RouteAnalysisEntry",
    "RouteAnalysisStore",
    "SQLiteRepositoryStore",
    "SQLiteRouteStore",
    "open_stores",
]
