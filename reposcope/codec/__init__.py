"""Prompt building and response decoding for model calls."""

from reposcope.codec.decoders import (
    HOME_ROUTE,
    TRACE_PLACEHOLDER,
    decode_architecture,
    decode_relevant_files,
    decode_route_catalog,
    decode_route_trace,
)
from reposcope.codec.json_blocks import extract_json
from reposcope.codec.mermaid import repair_edge_labels
from reposcope.codec.models import (
    LIFECYCLE_ROLES,
    ArchitectureAnalysis,
    Decoded,
    Fallback,
    Parsed,
    ParsedExecutionStep,
    RouteDetail,
    RouteTrace,
)
from reposcope.codec.references import infer_snippet_language, resolve_source_references
from reposcope.codec.steps import parse_execution_steps

__all__ = [
    "HOME_ROUTE",
    "LIFECYCLE_ROLES",
    "TRACE_PLACEHOLDER",
    "ArchitectureAnalysis",
    "Decoded",
    "Fallback",
    "Parsed",
    "ParsedExecutionStep",
    "RouteDetail",
    "RouteTrace",
    "decode_architecture",
    "decode_relevant_files",
    "decode_route_catalog",
    "decode_route_trace",
    "extract_json",
    "infer_snippet_language",
    "parse_execution_steps",
    "repair_edge_labels",
    "resolve_source_references",
]
