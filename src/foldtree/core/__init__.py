"""Core library: nodes, the tree container with its navigation, and windowed rendering."""

from foldtree.core.keys import (
    DEFAULT_KEYMAP,
    NERD_FONT_SYMBOLS,
    PLAIN_SYMBOLS,
    Action,
    Command,
    Key,
    KeyMap,
    Resize,
    Symbols,
)
from foldtree.core.node import ROOT, Branch, Holder, Node, NodeId, RootContainer
from foldtree.core.render import FOCUSED_STYLE, UNFOCUSED_STYLE, render_full, render_window
from foldtree.core.tree import Tree

__all__ = [
    "DEFAULT_KEYMAP",
    "NERD_FONT_SYMBOLS",
    "PLAIN_SYMBOLS",
    "Action",
    "Command",
    "Key",
    "KeyMap",
    "Resize",
    "Symbols",
    "ROOT",
    "Branch",
    "Holder",
    "Node",
    "NodeId",
    "RootContainer",
    "FOCUSED_STYLE",
    "UNFOCUSED_STYLE",
    "render_full",
    "render_window",
    "Tree",
]
