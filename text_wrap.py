from __future__ import annotations

from typing import List


def wrap_text(text: str, max_chars: int) -> List[str]:
    """
    Greedy word wrap.

    Words are whitespace-delimited and never split: a word longer than
    max_chars sits alone on its own (overflowing) line. Empty input gives [].
    """
    lines: List[str] = []
    line = ""
    for word in (text or "").split():
        if len(line + " " + word) <= max_chars:
            line = word if not line else line + " " + word
        else:
            if line:
                lines.append(line)
            line = word
    if line:
        lines.append(line)
    return lines


def truncate(text: str, max_len: int) -> str:
    """Clip to max_len characters, marking the cut with "..."."""
    text = text or ""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[: max_len - 3] + "..."
