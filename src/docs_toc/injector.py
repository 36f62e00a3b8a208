"""
TOC injector: update a target document in place.

Workflow:
1. Read the file
2. Scan TOC start and end markers
3. Analyze the document (active mark, stale regions)
4. Ask for confirmation when stale regions exist
5. Transform the document (clean stale regions, inject the new TOC)
6. Write the file back

Every failure is reported through InjectionResult; nothing here raises for
I/O problems or unusual documents.
"""

import asyncio
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .analyzer import analyze_document
from .constants import TOC_MARK
from .models import (
    CleanupConfirmCallback,
    CleanupInfo,
    InjectionResult,
    InjectionStatus,
)
from .tag_scanner import scan_tags
from .transformer import build_cleanup_preview, transform_document

logger = logging.getLogger(__name__)

NO_MARK_MESSAGE = (
    f"No {TOC_MARK} mark found. Please add {TOC_MARK} where you want the TOC to appear."
)


@dataclass
class InjectorOptions:
    """
    Options for update_document().

    Attributes:
        on_cleanup_confirm: Awaited with a CleanupInfo when stale regions
            exist and auto_approve is False. Returning False cancels the run.
        auto_approve: Skip confirmation and always clean stale regions.
    """
    on_cleanup_confirm: Optional[CleanupConfirmCallback] = None
    auto_approve: bool = False


# Line terminator: CRLF or a bare LF
LINE_BREAK_PATTERN = re.compile(r"\r?\n")


def detect_newline(content: str) -> str:
    """Return the document's dominant line separator: CRLF or LF."""
    crlf = content.count("\r\n")
    lf = content.count("\n") - crlf
    return "\r\n" if crlf > lf else "\n"


def read_document(path: Path) -> tuple[list[str], str]:
    """
    Read a document as lines, keeping track of its line-ending style.

    Lines are split on both CRLF and LF so files with mixed endings are
    scanned correctly; they are written back with the dominant style.

    Raises:
        OSError, UnicodeDecodeError: If the file cannot be read.
    """
    with open(path, "r", encoding="utf-8", newline="") as handle:
        content = handle.read()
    return LINE_BREAK_PATTERN.split(content), detect_newline(content)


def write_document(path: Path, lines: list[str], newline: str = "\n") -> None:
    """
    Write lines to path atomically.

    The text goes to a temporary file next to the target which then replaces
    it, so a failed write leaves the original untouched. Symlinks are
    followed: the file they point at is replaced and the link is kept.

    Raises:
        OSError: If the file cannot be written.
    """
    path = path.resolve()
    fd, tmp_name = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(newline.join(lines))
        if path.exists():
            os.chmod(tmp, path.stat().st_mode & 0o7777)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


async def update_document(
    file_path: Union[str, Path],
    new_toc: str,
    options: Optional[InjectorOptions] = None,
) -> InjectionResult:
    """
    Update the TOC in a target file.

    Args:
        file_path: Target markdown file.
        new_toc: TOC body to inject.
        options: Confirmation callback and auto-approve flag.

    Returns:
        InjectionResult describing the outcome.
    """
    options = options or InjectorOptions()
    path = Path(file_path)

    # 1. Read
    try:
        lines, newline = read_document(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read {path}: {e}")
        return InjectionResult(
            success=False,
            message=f"Failed to read file: {path}",
            status=InjectionStatus.READ_FAILURE,
        )

    # 2. Scan
    scan = scan_tags(lines)

    # 3. No start marker: only dangling end markers can be cleaned
    if not scan.marks:
        cleaned = 0
        if scan.ends:
            analysis = analyze_document(lines, scan.marks, scan.ends)
            # Without an active mark, transform only drops the orphan ends
            new_lines = transform_document(analysis, "")
            try:
                write_document(path, new_lines, newline)
                cleaned = len(scan.ends)
                logger.info(f"Removed {cleaned} orphan end markers from {path}")
            except OSError as e:
                logger.error(f"Failed to write {path}: {e}")
        return InjectionResult(
            success=False,
            message=NO_MARK_MESSAGE,
            cleaned_regions=cleaned,
            status=InjectionStatus.NO_MARK,
        )

    # 4. Analyze
    analysis = analyze_document(lines, scan.marks, scan.ends)

    # 5. Stale regions need consent
    if analysis.stale_regions and not options.auto_approve:
        preview = build_cleanup_preview(analysis)

        if options.on_cleanup_confirm is None:
            logger.info(f"Cleanup of {len(preview.regions)} regions pending confirmation")
            return InjectionResult(
                success=False,
                message=preview.summary,
                move_detected=analysis.move_detected,
                status=InjectionStatus.CLEANUP_PENDING,
            )

        info = CleanupInfo(
            regions=list(analysis.stale_regions),
            total_lines=preview.total_lines,
            description=preview.summary,
        )
        confirmed = await options.on_cleanup_confirm(info)
        if not confirmed:
            return InjectionResult(
                success=False,
                message="Cleanup cancelled by user.",
                move_detected=analysis.move_detected,
                status=InjectionStatus.CLEANUP_CANCELLED,
            )

    # 6. Transform
    new_lines = transform_document(analysis, new_toc)

    # 7. Write back
    try:
        write_document(path, new_lines, newline)
    except OSError as e:
        logger.error(f"Failed to write {path}: {e}")
        return InjectionResult(
            success=False,
            message=f"Failed to write file: {path}",
            move_detected=analysis.move_detected,
            status=InjectionStatus.WRITE_FAILURE,
        )

    logger.info(f"TOC updated in {path} ({len(analysis.stale_regions)} regions cleaned)")
    return InjectionResult(
        success=True,
        message="TOC updated successfully.",
        cleaned_regions=len(analysis.stale_regions),
        move_detected=analysis.move_detected,
        status=InjectionStatus.UPDATED,
    )


def update_document_sync(
    file_path: Union[str, Path],
    new_toc: str,
    options: Optional[InjectorOptions] = None,
) -> InjectionResult:
    """Run update_document() to completion from synchronous code."""
    return asyncio.run(update_document(file_path, new_toc, options))
