"""Decoders for model responses.

Each decoder returns ``Parsed`` when the model's output could be used as
is, or ``Fallback`` with a documented substitute. None of them raise.
"""

from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from reposcope.codec.json_blocks import extract_json
from reposcope.codec.mermaid import (
    DEFAULT_ARCHITECTURE_DIAGRAM,
    FLOW_PLACEHOLDER,
    ensure_mermaid_fence,
    extract_graph_block,
    repair_edge_labels,
)
from reposcope.codec.models import (
    ArchitectureAnalysis,
    Decoded,
    Fallback,
    Parsed,
    RouteDetail,
    RouteTrace,
)
from reposcope.codec.prompts import MAX_RELEVANT_FILES

logger = logging.getLogger(__name__)

MAX_FALLBACK_NARRATIVE_CHARS = 600
TRACE_PLACEHOLDER = "Failed to extract trace from LLM response."

HOME_ROUTE = RouteDetail(
    path="/",
    method="PAGE",
    functionality="Main entry point of the application.",
    contribution="Serves as the landing page for all users.",
    lifecycle_role="UI Rendering",
)

_FENCED_BLOCK_RE = re.compile(r"```[\s\S]*?```")
_FLOW_SECTION_RE = re.compile(r"### FLOW_VISUALIZATION\n([\s\S]*?)(?=### EXECUTION_TRACE)")
_TRACE_SECTION_RE = re.compile(r"### EXECUTION_TRACE\n([\s\S]*)")


def decode_architecture(text: str) -> Decoded[ArchitectureAnalysis]:
    """JSON object with ``overallFlow`` and ``architectureMermaid``.

    Fallback: the first ``graph`` block found anywhere in the text (or a
    placeholder diagram) and the text minus fenced blocks, cut to 600 chars.
    """
    text = repair_edge_labels(text)
    try:
        analysis = ArchitectureAnalysis.model_validate(extract_json(text))
    except (ValueError, ValidationError) as e:
        reason = f"architecture response not valid JSON: {e}"
    else:
        return Parsed(
            analysis.model_copy(
                update={
                    "architecture_diagram": repair_edge_labels(
                        analysis.architecture_diagram
                    )
                }
            )
        )

    narrative = _FENCED_BLOCK_RE.sub("", text)[:MAX_FALLBACK_NARRATIVE_CHARS]
    diagram = extract_graph_block(text) or DEFAULT_ARCHITECTURE_DIAGRAM
    return Fallback(
        ArchitectureAnalysis(overall_flow=narrative, architecture_diagram=diagram),
        reason,
    )


def decode_route_catalog(text: str) -> Decoded[list[RouteDetail]]:
    """JSON array of route entries, kept as the model wrote them.

    Only entries that are not objects or lack a ``path`` are dropped. The
    synthetic home-page route is the fallback for non-JSON or non-array
    output.
    """
    try:
        payload = extract_json(text)
    except ValueError as e:
        return Fallback([HOME_ROUTE], f"route catalog not valid JSON: {e}")
    if not isinstance(payload, list):
        return Fallback([HOME_ROUTE], "route catalog is not a JSON array")

    routes = []
    for entry in payload:
        try:
            routes.append(RouteDetail.model_validate(entry))
        except ValidationError as e:
            logger.debug("Dropping unusable route entry %r: %s", entry, e)
    return Parsed(routes)


def decode_relevant_files(text: str) -> Decoded[list[str]]:
    """JSON array of path strings; non-strings discarded. Fallback: empty."""
    try:
        payload = extract_json(text)
    except ValueError as e:
        return Fallback([], f"relevant files not valid JSON: {e}")
    if not isinstance(payload, list):
        return Fallback([], "relevant files is not a JSON array")
    paths = [p.strip() for p in payload if isinstance(p, str) and p.strip()]
    return Parsed(paths[:MAX_RELEVANT_FILES])


def decode_route_trace(text: str) -> Decoded[RouteTrace]:
    """Split the response on the two section headers.

    A missing section is replaced by its placeholder. The flow diagram is
    fenced as mermaid if the model left the fence out.
    """
    flow_match = _FLOW_SECTION_RE.search(text)
    trace_match = _TRACE_SECTION_RE.search(text)
    flow_body = flow_match.group(1).strip() if flow_match else ""
    trace_body = trace_match.group(1).strip() if trace_match else ""

    flow = (
        ensure_mermaid_fence(repair_edge_labels(flow_body))
        if flow_body
        else FLOW_PLACEHOLDER
    )
    trace = trace_body or TRACE_PLACEHOLDER
    result = RouteTrace(flow_visualization=flow, execution_trace=trace)

    missing = [
        name
        for name, body in (("FLOW_VISUALIZATION", flow_body), ("EXECUTION_TRACE", trace_body))
        if not body
    ]
    if missing:
        return Fallback(result, f"missing section(s): {', '.join(missing)}")
    return Parsed(result)
