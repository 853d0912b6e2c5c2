"""Windowed rendering: draw only the visible rows that fall inside the viewport."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.style import Style
from rich.text import Text

if TYPE_CHECKING:
    from foldtree.core.node import Node, NodeId
    from foldtree.core.tree import Tree

FOCUSED_STYLE = Style(bgcolor="color(62)")
UNFOCUSED_STYLE = Style()
INDENT = "  "


def render_row(tree: Tree, node: Node, depth: int, *, focused: bool) -> Text:
    """Build one row: indent, expand indicator, icon, a space, then the name."""
    symbols = tree.symbols
    if not node.can_expand:
        indicator = symbols.leaf
    elif node.is_open:
        indicator = symbols.open
    else:
        indicator = symbols.closed

    # Icon and label styles sit under the base style, so the focus highlight wins.
    base = FOCUSED_STYLE if focused else UNFOCUSED_STYLE
    row = Text(INDENT * depth + indicator)
    row.append(node.icon(), style=node.icon_style() + base)
    row.append(" ", style=base)
    row.append(node.name, style=node.label_style() + base)
    return row


def _render_node(
    tree: Tree,
    node: Node,
    depth: int,
    line: int,
    bottom: int | None,
    rows: list[Text],
    focused_id: NodeId | None,
) -> int:
    """
    Render ``node`` and its open descendants, returning the advanced line counter.

    Lines below zero lie above the viewport: they are counted, not drawn. Once the
    counter reaches ``bottom`` nothing further is visited.
    """
    if line >= 0:
        rows.append(render_row(tree, node, depth, focused=node.id == focused_id))
    line += 1
    if bottom is not None and line >= bottom:
        return line
    if node.is_open:
        for child in tree.items(node.holder):
            line = _render_node(tree, child, depth + 1, line, bottom, rows, focused_id)
            if bottom is not None and line >= bottom:
                break
    return line


def render_window(tree: Tree) -> Text:
    """
    Render the slice of visible rows in ``[viewport_top, viewport_top + height)``.

    Before the first resize (or with a zero-height viewport) the output is empty.
    """
    if not tree.initialized or tree.height <= 0:
        return Text()
    rows: list[Text] = []
    with tree.lock:
        line = -tree.viewport_top
        for node in tree.roots:
            line = _render_node(tree, node, 0, line, tree.height, rows, tree.focused_id)
            if line >= tree.height:
                break
    return Text("\n").join(rows)


def render_full(tree: Tree) -> Text:
    """Render every visible row, ignoring the viewport and focus."""
    rows: list[Text] = []
    with tree.lock:
        line = 0
        for node in tree.roots:
            line = _render_node(tree, node, 0, line, None, rows, None)
    return Text("\n").join(rows)
