"""Greedy text chunking for the per-request character limit."""

from typing import List

# (separator, characters of the separator kept at the end of the chunk)
# Tried in order; the first separator found inside the window wins.
_SEPARATORS = ((". ", 1), ("\n", 0), (" ", 0))


def _find_split(text: str, limit: int) -> int:
    # str.rfind end is exclusive, so a separator may start at index ``limit``
    for separator, keep in _SEPARATORS:
        position = text.rfind(separator, 0, limit + 1)
        if position > 0:
            return min(position + keep, limit)
    return limit


def split_text(text: str, limit: int) -> List[str]:
    """Split ``text`` into chunks of at most ``limit`` characters.

    Prefers breaking after a sentence end, then at a newline, then at
    whitespace, else cuts hard at ``limit``. Chunks are stripped and never
    empty.
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")

    chunks: List[str] = []
    remainder = text.strip()
    while remainder:
        if len(remainder) <= limit:
            chunks.append(remainder)
            break
        split_at = _find_split(remainder, limit)
        chunk = remainder[:split_at].strip()
        if chunk:
            chunks.append(chunk)
        remainder = remainder[split_at:].strip()
    return chunks
