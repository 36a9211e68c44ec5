"""Mermaid post-processing: edge-label repair, fallbacks and fencing."""

from __future__ import annotations

import re

DEFAULT_ARCHITECTURE_DIAGRAM = 'graph TD\n    A["Could not generate diagram"]'
FLOW_PLACEHOLDER = '```mermaid\ngraph TD\n  A["Failed to extract flowchart"]\n```'

# A -->|label|> B  ->  A -->|label| B
_EDGE_LABEL_RE = re.compile(r"-->\|([^|]+)\|>")
_GRAPH_BLOCK_RE = re.compile(r"graph\s+(?:TD|LR|TB)[\s\S]*?(?=\n\n|\Z)")


def repair_edge_labels(diagram: str) -> str:
    return _EDGE_LABEL_RE.sub(r"-->|\1|", diagram)


def extract_graph_block(text: str) -> str | None:
    """First ``graph TD|LR|TB`` block up to a blank line or end of text."""
    match = _GRAPH_BLOCK_RE.search(text)
    return match.group(0) if match else None


def ensure_mermaid_fence(flow: str) -> str:
    if "```mermaid" in flow:
        return flow
    return f"```mermaid\n{flow}\n```"
