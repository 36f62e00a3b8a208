"""
Build a document tree from relative markdown paths.
"""

from typing import Iterable

from .models import DocNode


def build_tree_from_paths(paths: Iterable[str], link_prefix: str = "") -> list[DocNode]:
    """
    Turn POSIX relative paths into a nested DocNode tree.

    Args:
        paths: File paths relative to the scan root, e.g. ``guide/intro.md``.
        link_prefix: Prefix joined onto each file's link path, typically the
            scan root relative to the output document (``docs``).

    Returns:
        Top-level nodes, in first-seen order. Directories come from the
        segments of file paths.
    """
    roots: list[DocNode] = []
    dirs: dict[str, DocNode] = {}
    prefix = link_prefix.strip("/")

    for rel in paths:
        segments = [segment for segment in rel.split("/") if segment]
        if not segments:
            continue

        siblings = roots
        for depth, segment in enumerate(segments[:-1]):
            dir_path = "/".join(segments[:depth + 1])
            node = dirs.get(dir_path)
            if node is None:
                node = DocNode(name=segment, type="dir", path=dir_path)
                dirs[dir_path] = node
                siblings.append(node)
            siblings = node.children

        file_path = "/".join(segments)
        link_path = f"{prefix}/{file_path}" if prefix else file_path
        siblings.append(DocNode(
            name=segments[-1],
            type="file",
            path=file_path,
            link_path=link_path,
        ))

    return roots


def walk_tree(nodes: list[DocNode]):
    """Yield every node depth-first, parents before children."""
    for node in nodes:
        yield node
        if node.children:
            yield from walk_tree(node.children)
