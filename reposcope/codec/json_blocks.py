"""JSON extraction from free-text model responses.

Grammar: the first fenced block (any language tag, or none) is parsed if
present; otherwise the whole trimmed response is parsed.
"""

from __future__ import annotations

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:[A-Za-z0-9_+-]*)[ \t]*\n?([\s\S]*?)```")


def extract_json(text: str) -> Any:
    """Parse the JSON payload of *text*.

    Raises:
        ValueError: No parseable JSON (``json.JSONDecodeError`` is a subclass).
    """
    match = _FENCE_RE.search(text)
    payload = match.group(1).strip() if match else text.strip()
    return json.loads(payload)
