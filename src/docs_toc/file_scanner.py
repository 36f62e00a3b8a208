"""
Markdown file discovery.

Only markdown files are collected; directories are inferred from the file
paths later, so empty folders never show up in the TOC.
"""

import fnmatch
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .constants import DEFAULT_IGNORE

logger = logging.getLogger(__name__)


def matches_ignore(rel_path: str, patterns: Iterable[str]) -> bool:
    """
    Check a POSIX relative path against glob ignore patterns.

    Patterns starting with ``**/`` also match at the root, so
    ``**/node_modules/**`` excludes ``node_modules/a.md`` as well as
    ``pkg/node_modules/a.md``.
    """
    for pattern in patterns:
        if fnmatch.fnmatchcase(rel_path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch.fnmatchcase(rel_path, pattern[3:]):
            return True
    return False


def scan_docs(
    root: Union[str, Path],
    ignore: Iterable[str] = (),
    max_depth: Optional[int] = None,
) -> list[str]:
    """
    Collect markdown files below a directory.

    Args:
        root: Directory to scan.
        ignore: Extra glob patterns to exclude, on top of DEFAULT_IGNORE.
        max_depth: Maximum number of path segments (1 = files directly in
            root). None means unlimited.

    Returns:
        Sorted list of POSIX paths relative to root.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        logger.warning(f"Scan root does not exist or is not a directory: {root_path}")
        return []

    patterns = [*DEFAULT_IGNORE, *ignore]
    files: list[str] = []

    for path in root_path.rglob("*.md"):
        if not path.is_file():
            continue
        rel = path.relative_to(root_path).as_posix()
        if max_depth is not None and rel.count("/") + 1 > max_depth:
            continue
        if matches_ignore(rel, patterns):
            continue
        files.append(rel)

    files.sort()
    logger.debug(f"Found {len(files)} markdown files under {root_path}")
    return files
