"""foldtree: keyboard-navigable, lazily populated tree view for terminal UIs."""

from importlib.metadata import version, PackageNotFoundError

from foldtree.core import (
    DEFAULT_KEYMAP,
    Action,
    Command,
    Key,
    KeyMap,
    Node,
    Resize,
    Tree,
)

__all__ = [
    "DEFAULT_KEYMAP",
    "Action",
    "Command",
    "Key",
    "KeyMap",
    "Node",
    "Resize",
    "Tree",
    "__version__",
]

try:
    __version__ = version("foldtree")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed as package
