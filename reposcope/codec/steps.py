"""Parse a markdown execution trace into ordered step records.

A trace with no ``Step N:`` markers yields an empty list; callers show
the raw text instead.
"""

from __future__ import annotations

import re

from reposcope.codec.models import ParsedExecutionStep

_BULLET_RE = re.compile(r"^\*\*? ", re.MULTILINE)
_STEP_RE = re.compile(r"\*?\*?Step (\d+):\s*([^\n*]+)\*?\*?")
_LOCATION_RE = re.compile(r"\*?\*?Location:\*?\*?\s*([^\n]+)")
_CODE_RE = re.compile(r"```(\w*)\n([\s\S]*?)```")
_EXPLANATION_RE = re.compile(r"\*?\*?Explanation:\*?\*?\s*([\s\S]+?)(?:\n\n|\*\*Step|\Z)")


def _strip_stars(value: str) -> str:
    return value.strip().strip("*")


def parse_execution_steps(trace: str) -> list[ParsedExecutionStep]:
    text = _BULLET_RE.sub("", trace)
    markers = list(_STEP_RE.finditer(text))

    steps = []
    for i, marker in enumerate(markers):
        end = markers[i + 1].start() if i + 1 < len(markers) else len(text)
        block = text[marker.start() : end]

        location = _LOCATION_RE.search(block)
        code = _CODE_RE.search(block)
        explanation = _EXPLANATION_RE.search(block)

        steps.append(
            ParsedExecutionStep(
                number=int(marker.group(1)),
                title=marker.group(2).strip(),
                location=_strip_stars(location.group(1)) if location else "",
                language=(code.group(1) or "plaintext") if code else "plaintext",
                code=code.group(2).strip() if code else "",
                explanation=_strip_stars(explanation.group(1)) if explanation else "",
            )
        )
    return steps
