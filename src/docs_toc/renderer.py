"""
Render a sorted document tree as a markdown bullet list.
"""

from urllib.parse import quote

from .models import DocNode

# Characters encodeURI leaves alone besides letters, digits and "-_.~"
URI_SAFE = ";,/?:@&=+$!*'()#"

INDENT = "  "


def encode_link(path: str) -> str:
    """Percent-encode a link path so non-ASCII and spaces survive in links."""
    return quote(path, safe=URI_SAFE)


def render_to_markdown(nodes: list[DocNode], depth: int = 0) -> str:
    """
    Render nodes as an indented markdown list.

    Files become links, directories plain entries with their children nested
    one level deeper. Ignored nodes are skipped with their whole subtree.

    Args:
        nodes: Sorted tree nodes.
        depth: Current indentation depth.

    Returns:
        Markdown text; every entry ends with a newline.
    """
    output = []
    indent = INDENT * depth

    for node in nodes:
        if node.meta.is_ignored:
            continue

        name = node.display_name
        if node.is_dir:
            output.append(f"{indent}- {name}\n")
            if node.children:
                output.append(render_to_markdown(node.children, depth + 1))
        else:
            output.append(f"{indent}- [{name}]({encode_link(node.link_path or node.path)})\n")

    return "".join(output)
