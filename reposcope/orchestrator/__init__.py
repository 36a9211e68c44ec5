"""Request-level flows composing evidence, codec, pool and cache."""

from reposcope.orchestrator.repository import AnalysisResult, HostFactory, RepositoryAnalyzer
from reposcope.orchestrator.route import RouteAnalysisOutcome, RouteAnalyzer

__all__ = [
    "AnalysisResult",
    "HostFactory",
    "RepositoryAnalyzer",
    "RouteAnalysisOutcome",
    "RouteAnalyzer",
]
