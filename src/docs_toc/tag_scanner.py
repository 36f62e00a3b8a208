"""
TOC tag scanning.

Finds TOC start markers (``<!--toc-->``) and end markers
(``<!--tocEnd:offset=N-->``) in a document, skipping anything inside fenced
code blocks so examples in code samples are never treated as live markers.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .models import EndInfo, MarkInfo

# Case-insensitive, whitespace tolerant around the tag name
MARK_PATTERN = re.compile(r"^<!--\s*toc\s*-->$", re.IGNORECASE)
END_PATTERN = re.compile(
    r"^<!--\s*tocEnd(?:\s*:\s*offset\s*=\s*(\d+))?\s*-->$",
    re.IGNORECASE,
)

# Opening fence: 3+ backticks or tildes, optionally followed by an info string
FENCE_OPEN_PATTERN = re.compile(r"^(`{3,}|~{3,})[^`]*$")
FENCE_CLOSE_PATTERN = re.compile(r"^(`{3,}|~{3,})$")


@dataclass
class TagScan:
    """Markers found outside fenced code, in document order."""
    marks: list[MarkInfo] = field(default_factory=list)
    ends: list[EndInfo] = field(default_factory=list)


def update_fence(fence: Optional[str], stripped: str) -> Optional[str]:
    """
    Advance the fenced-code state by one line.

    Args:
        fence: The currently open fence token, or None outside code.
        stripped: The trimmed line.

    Returns:
        The fence token still open after this line, or None.
    """
    if fence is None:
        match = FENCE_OPEN_PATTERN.match(stripped)
        return match.group(1) if match else None

    match = FENCE_CLOSE_PATTERN.match(stripped)
    if match:
        closing = match.group(1)
        # Closed only by the same character, at least as long as the opener
        if closing[0] == fence[0] and len(closing) >= len(fence):
            return None
    return fence


def parse_mark(line: str) -> bool:
    """Check whether a line is a TOC start marker."""
    return MARK_PATTERN.match(line.strip()) is not None


def parse_end(line: str) -> Optional[int]:
    """
    Parse a TOC end marker.

    Returns:
        The recorded offset (0 when absent), or None if the line is not an
        end marker.
    """
    match = END_PATTERN.match(line.strip())
    if not match:
        return None
    return int(match.group(1)) if match.group(1) else 0


def scan_tags(lines: Iterable[str]) -> TagScan:
    """
    Scan document lines for TOC markers outside fenced code blocks.

    An unterminated fence keeps everything after it inside code, so no
    markers are recognized past it.

    Args:
        lines: Document lines in order.

    Returns:
        TagScan with all start and end markers in document order.
    """
    result = TagScan()
    fence: Optional[str] = None

    for index, line in enumerate(lines):
        stripped = line.strip()
        was_inside = fence is not None
        fence = update_fence(fence, stripped)

        # Fence lines themselves and everything between them are code
        if was_inside or fence is not None:
            continue

        if parse_mark(stripped):
            result.marks.append(MarkInfo(line_index=index, original_text=line))
            continue

        offset = parse_end(stripped)
        if offset is not None:
            result.ends.append(EndInfo(line_index=index, offset=offset))

    return result
