"""
Document transformation: clean stale regions and inject the new TOC.

Two phases:
1. Preview: build_cleanup_preview() describes what would be deleted so the
   user can confirm it.
2. Execute: transform_document() produces the rewritten lines.

Only stale regions need confirmation. Replacing the content between the
active mark and its matching end is the normal update and always allowed.
"""

import logging

from .constants import MAX_BLANK_LINES, PREVIEW_WIDTH, TOC_END_TEMPLATE
from .models import CleanupPreview, DocumentAnalysis, RegionPreview

logger = logging.getLogger(__name__)

CLEANUP_TIP = (
    "Tip: You can delete unwanted content by hand (including its <!--tocEnd--> "
    "marker) and keep only one <!--toc--> mark."
)


def truncate(text: str, max_len: int = PREVIEW_WIDTH) -> str:
    """Trim and shorten text for display, marking cuts with '...'."""
    trimmed = text.strip()
    if len(trimmed) > max_len:
        return trimmed[:max_len - 3] + "..."
    return trimmed


def build_cleanup_preview(analysis: DocumentAnalysis) -> CleanupPreview:
    """
    Build a preview of the stale regions a transform would remove.

    Args:
        analysis: Document analysis from analyze_document().

    Returns:
        CleanupPreview. needs_cleanup is False with no regions and an empty
        summary when the document is clean.
    """
    if not analysis.stale_regions:
        return CleanupPreview(needs_cleanup=False)

    lines = analysis.lines
    ordered = sorted(analysis.stale_regions, key=lambda region: region.start_line)

    regions = [
        RegionPreview(
            region_index=number,
            start_line=region.start_line + 1,
            end_line=region.end_line + 1,
            kind=region.kind,
            first_line_content=truncate(lines[region.start_line]),
            last_line_content=truncate(lines[region.end_line]),
            line_count=region.line_count,
        )
        for number, region in enumerate(ordered, start=1)
    ]

    return CleanupPreview(
        needs_cleanup=True,
        regions=regions,
        summary=format_cleanup_summary(regions),
    )


def format_cleanup_summary(regions: list[RegionPreview]) -> str:
    """Format region previews as a multi-line summary for the CLI."""
    parts = ["Detected stale regions to clean:", ""]

    for region in regions:
        parts.append(
            f"Region {region.region_index} [{region.kind.label}] "
            f"(line {region.start_line}-{region.end_line}):"
        )
        parts.append(f"  {region.start_line}: {region.first_line_content}")
        if region.line_count > 2:
            parts.append(f"  ... ({region.line_count - 2} more lines)")
        if region.line_count > 1:
            parts.append(f"  {region.end_line}: {region.last_line_content}")
        parts.append("")

    parts.append(CLEANUP_TIP)
    return "\n".join(parts)


def build_toc_block(new_toc: str) -> list[str]:
    """
    Split the TOC body into lines and append an end marker recording its size.

    The body is blank-line normalized here so the recorded offset matches
    the lines left in the document after the final normalization pass.
    """
    toc_lines = normalize_blank_lines(new_toc.split("\n"))
    return toc_lines + [TOC_END_TEMPLATE.format(offset=len(toc_lines))]


def transform_document(analysis: DocumentAnalysis, new_toc: str) -> list[str]:
    """
    Rewrite the document: drop stale regions and inject the new TOC.

    Call this after the user has confirmed the cleanup, or when no cleanup
    is needed. Without an active mark nothing is injected and only stale
    regions are removed.

    Args:
        analysis: Document analysis from analyze_document().
        new_toc: TOC body to inject, as a multi-line string.

    Returns:
        The new document lines, blank-line normalized.
    """
    lines = analysis.lines
    active_mark = analysis.active_mark

    to_remove: set[int] = set()
    for region in analysis.stale_regions:
        to_remove.update(range(region.start_line, region.end_line + 1))

    # Old TOC content and its end marker; a fresh end marker is written below
    span = analysis.active_span
    if span is not None:
        to_remove.update(range(span[0], span[1] + 1))

    toc_block = build_toc_block(new_toc) if active_mark is not None else []

    new_lines: list[str] = []
    for index, line in enumerate(lines):
        if index in to_remove:
            continue
        new_lines.append(line)
        if active_mark is not None and index == active_mark.line_index:
            new_lines.extend(toc_block)

    logger.debug(f"Removed {len(to_remove)} lines, injected {len(toc_block)} lines")
    return normalize_blank_lines(new_lines)


def normalize_blank_lines(lines: list[str], max_blank: int = MAX_BLANK_LINES) -> list[str]:
    """Collapse runs of blank lines to at most max_blank lines."""
    result: list[str] = []
    consecutive = 0

    for line in lines:
        if line.strip() == "":
            consecutive += 1
            if consecutive > max_blank:
                continue
        else:
            consecutive = 0
        result.append(line)

    return result
