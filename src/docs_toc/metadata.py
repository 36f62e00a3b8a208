"""
Per-file metadata extraction.

Reads YAML front-matter (title, order, ignore) from each markdown file in
the tree, falling back to the first level-1 heading for the title.
"""

import logging
import re
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .models import DocNode, NodeMeta
from .tag_scanner import update_fence
from .tree import walk_tree

logger = logging.getLogger(__name__)

FRONT_MATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
H1_PATTERN = re.compile(r"^#\s+(.+?)\s*#*\s*$")


def parse_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """
    Split YAML front-matter from a markdown document.

    Args:
        text: Full markdown text.

    Returns:
        Tuple of (front-matter dict, remaining body). Missing or invalid
        front-matter yields an empty dict and the unchanged text.
    """
    match = FRONT_MATTER_PATTERN.match(text)
    if not match:
        return {}, text

    try:
        loaded = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.warning(f"Invalid front-matter ignored: {e}")
        return {}, text

    if not isinstance(loaded, dict):
        return {}, text[match.end():]
    return loaded, text[match.end():]


def extract_first_heading(text: str) -> Optional[str]:
    """Return the first level-1 heading outside fenced code, if any."""
    fence: Optional[str] = None
    for line in text.splitlines():
        stripped = line.strip()
        was_inside = fence is not None
        fence = update_fence(fence, stripped)
        if was_inside or fence is not None:
            continue
        match = H1_PATTERN.match(line)
        if match:
            return match.group(1)
    return None


def _coerce_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def extract_meta(text: str) -> NodeMeta:
    """Build NodeMeta from a markdown file's content."""
    front, body = parse_front_matter(text)

    title = front.get("title")
    if title is not None:
        title = str(title).strip() or None
    if title is None:
        title = extract_first_heading(body)

    ignore = front.get("ignore", front.get("toc_ignore"))

    return NodeMeta(
        title=title,
        order=_coerce_int(front.get("order")),
        ignore=bool(ignore) if ignore is not None else None,
    )


def enrich_tree(nodes: list[DocNode], root: Union[str, Path]) -> list[DocNode]:
    """
    Attach front-matter metadata to every file node.

    Unreadable files are logged and keep empty metadata.

    Args:
        nodes: Tree from build_tree_from_paths().
        root: Scan root the node paths are relative to.

    Returns:
        The same nodes, enriched in place.
    """
    root_path = Path(root)
    for node in walk_tree(nodes):
        if node.is_dir:
            continue
        file_path = root_path / node.path
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {file_path}: {e}")
            continue

        meta = extract_meta(text)
        node.meta.title = meta.title
        node.meta.order = meta.order
        node.meta.ignore = meta.ignore

    return nodes
