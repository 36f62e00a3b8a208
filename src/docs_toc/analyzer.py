"""
Document analysis for TOC injection.

Takes the markers found by the tag scanner and decides:
- which start marker receives the new TOC (the active mark)
- which leftover regions must be cleaned up (stale regions)
- whether the active marker appears to have been moved by hand

The analyzer never raises. Unexpected marker layouts degrade to stale
regions that the user is asked to confirm, so user content is never removed
silently.
"""

import logging
import re
from dataclasses import replace
from typing import Optional, Sequence

from .models import (
    DocumentAnalysis,
    EndInfo,
    MarkInfo,
    StaleRegion,
    StaleRegionKind,
)

logger = logging.getLogger(__name__)

# Bullet or ordered list item, after optional indentation
LIST_ITEM_PATTERN = re.compile(r"^\s*(?:[-*+]|\d+[.)])(?:\s|$)")


def is_toc_shaped(lines: Sequence[str]) -> bool:
    """
    Check whether a block of lines looks like a generated TOC.

    A TOC block has at least one non-blank line and every non-blank line is
    a list item. Blank lines are allowed anywhere.
    """
    non_blank = [line for line in lines if line.strip()]
    if not non_blank:
        return False
    return all(LIST_ITEM_PATTERN.match(line) for line in non_blank)


def pair_markers(
    marks: Sequence[MarkInfo],
    ends: Sequence[EndInfo],
) -> dict[int, int]:
    """
    Pair start markers with end markers.

    Markers are walked in line order. An end marker pairs with the start
    marker directly before it when that start is still open; any other end
    is left unpaired. A pair therefore never encloses another marker.

    Returns:
        Mapping of start line index to end line index.
    """
    events = sorted(
        [(mark.line_index, "mark") for mark in marks]
        + [(end.line_index, "end") for end in ends]
    )

    pairs: dict[int, int] = {}
    open_mark: Optional[int] = None

    for line_index, kind in events:
        if kind == "mark":
            # A new start abandons any earlier start left open
            open_mark = line_index
        elif open_mark is not None:
            pairs[open_mark] = line_index
            open_mark = None

    return pairs


def _apply_pairs(
    marks: Sequence[MarkInfo],
    ends: Sequence[EndInfo],
    pairs: dict[int, int],
) -> tuple[list[MarkInfo], list[EndInfo]]:
    """Return copies of the markers with their pairing fields filled in."""
    reverse = {end_index: mark_index for mark_index, end_index in pairs.items()}

    paired_marks = [
        replace(
            mark,
            has_matching_end=mark.line_index in pairs,
            matching_end_index=pairs.get(mark.line_index),
        )
        for mark in marks
    ]
    paired_ends = [
        replace(
            end,
            has_matching_mark=end.line_index in reverse,
            matching_mark_index=reverse.get(end.line_index),
        )
        for end in ends
    ]
    return paired_marks, paired_ends


def analyze_document(
    lines: list[str],
    marks: Sequence[MarkInfo],
    ends: Sequence[EndInfo],
) -> DocumentAnalysis:
    """
    Analyze scanned markers and classify stale regions.

    Args:
        lines: Full document lines.
        marks: Start markers from the tag scanner.
        ends: End markers from the tag scanner.

    Returns:
        DocumentAnalysis with the active mark, stale regions (sorted by
        start line, never overlapping) and the move detection flag.
    """
    pairs = pair_markers(marks, ends)
    paired_marks, paired_ends = _apply_pairs(marks, ends, pairs)

    # The last start marker in the document receives the new TOC
    active_mark = paired_marks[-1] if paired_marks else None
    move_detected = False
    regions: list[StaleRegion] = []

    # Every other complete block is a duplicate left by an earlier run
    for mark in paired_marks:
        if mark is active_mark or not mark.has_matching_end:
            continue
        regions.append(StaleRegion(
            kind=StaleRegionKind.COMPLETE,
            start_line=mark.line_index,
            end_line=mark.matching_end_index,
        ))

    if active_mark is not None and active_mark.has_matching_end:
        end_index = active_mark.matching_end_index
        end = next(e for e in paired_ends if e.line_index == end_index)
        content = lines[active_mark.line_index + 1:end_index]

        has_text = any(line.strip() for line in content)
        if end.offset > 0 and len(content) != end.offset and has_text and not is_toc_shaped(content):
            # The end belongs to an older block: the start marker was moved
            # above unrelated content. Keep that content and flag the end.
            logger.warning(
                f"TOC mark on line {active_mark.line_index + 1} encloses "
                f"{len(content)} lines but its end marker recorded {end.offset}; "
                "treating the end marker as displaced"
            )
            active_mark = replace(active_mark, has_matching_end=False, matching_end_index=None)
            paired_marks[-1] = active_mark
            paired_ends = [
                replace(e, has_matching_mark=False, matching_mark_index=None)
                if e.line_index == end_index else e
                for e in paired_ends
            ]
            move_detected = True

    for end in paired_ends:
        if not end.has_matching_mark:
            regions.append(StaleRegion(
                kind=StaleRegionKind.ORPHAN_END,
                start_line=end.line_index,
                end_line=end.line_index,
            ))

    analysis = DocumentAnalysis(
        lines=lines,
        marks=paired_marks,
        ends=paired_ends,
        active_mark=active_mark,
        stale_regions=regions,
    )

    moved = _detect_moved_content(analysis)
    if moved:
        regions.extend(moved)
        move_detected = True

    regions.sort(key=lambda region: region.start_line)
    analysis.move_detected = move_detected

    logger.debug(
        f"Analyzed {len(lines)} lines: {len(paired_marks)} marks, "
        f"{len(paired_ends)} ends, {len(regions)} stale regions"
    )
    return analysis


def _detect_moved_content(analysis: DocumentAnalysis) -> list[StaleRegion]:
    """
    Find old TOC blocks left above orphan end markers.

    An orphan end that recorded an offset of N had its TOC on the N lines
    directly above it. If those lines are still there, still TOC-shaped and
    not claimed by anything else, they are detached generated content.
    """
    marker_lines = {mark.line_index for mark in analysis.marks}
    marker_lines.update(end.line_index for end in analysis.ends)

    claimed: set[int] = set()
    for region in analysis.stale_regions:
        claimed.update(range(region.start_line, region.end_line + 1))
    span = analysis.active_span
    if span is not None:
        claimed.update(range(span[0], span[1] + 1))

    moved: list[StaleRegion] = []
    for end in analysis.ends:
        if end.has_matching_mark or end.offset <= 0:
            continue

        start = end.line_index - end.offset
        if start < 0:
            continue

        block_range = range(start, end.line_index)
        if any(i in marker_lines or i in claimed for i in block_range):
            continue
        if not is_toc_shaped(analysis.lines[start:end.line_index]):
            continue

        logger.info(
            f"Detached TOC content on lines {start + 1}-{end.line_index} "
            f"(orphan end on line {end.line_index + 1})"
        )
        moved.append(StaleRegion(
            kind=StaleRegionKind.MOVED_CONTENT,
            start_line=start,
            end_line=end.line_index - 1,
        ))
        claimed.update(block_range)

    return moved
