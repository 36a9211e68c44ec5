"""Section-level model calls used by the orchestrators."""

from reposcope.analysis.sections import (
    analyze_architecture,
    analyze_route_trace,
    analyze_routes,
    identify_relevant_files,
)

__all__ = [
    "analyze_architecture",
    "analyze_route_trace",
    "analyze_routes",
    "identify_relevant_files",
]
