"""Resolution of ``<<<FILE:path:start-end>>>`` markers into real code."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from reposcope.vcs.models import KeyFile

logger = logging.getLogger(__name__)

DEFAULT_SNIPPET_SPAN = 30
DEFAULT_SNIPPET_LANGUAGE = "typescript"

_REFERENCE_RE = re.compile(r"`?<+FILE:(.*?):(\d+)(?:-(\d+))?>+`?")

_EXTENSION_LANGUAGES = {
    ".py": "python",
    ".go": "go",
    ".js": "javascript",
    ".jsx": "javascript",
    ".rs": "rust",
    ".java": "java",
}


def infer_snippet_language(path: str) -> str:
    for ext, language in _EXTENSION_LANGUAGES.items():
        if path.endswith(ext):
            return language
    return DEFAULT_SNIPPET_LANGUAGE


def extract_lines(content: str, start: int, end: int | None = None) -> str:
    """Lines ``start..end`` of *content*, 1-based and inclusive.

    ``end`` defaults to ``start + DEFAULT_SNIPPET_SPAN``.
    """
    if end is None:
        end = start + DEFAULT_SNIPPET_SPAN
    lines = content.split("\n")
    return "\n".join(lines[max(start - 1, 0) : max(end, 0)])


def resolve_source_references(
    trace: str,
    fresh_files: Iterable[KeyFile],
    cached_files: Iterable[KeyFile] = (),
) -> str:
    """Replace every marker in *trace* with a fenced snippet.

    Files fetched for this call are searched before cached key files. A
    marker naming a file in neither set becomes a "File not found" block.
    """
    lookup: dict[str, str] = {}
    for f in cached_files:
        lookup[f.path] = f.content
    for f in fresh_files:
        lookup[f.path] = f.content

    def _replace(match: re.Match[str]) -> str:
        path = match.group(1)
        content = lookup.get(path)
        if content is None:
            logger.debug("Unresolved source reference: %s", path)
            return f"```plaintext\n// File not found: {path}\n```"
        start = int(match.group(2))
        end = int(match.group(3)) if match.group(3) else None
        snippet = extract_lines(content, start, end)
        return f"```{infer_snippet_language(path)}\n{snippet}\n```"

    return _REFERENCE_RE.sub(_replace, trace)
