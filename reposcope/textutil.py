TRUNCATION_MARKER = "\n... [TRUNCATED FOR CONTEXT LIMIT]"


def truncate(text: str, max_chars: int) -> str:
    """Cut *text* to *max_chars*, appending a visible marker when cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER
