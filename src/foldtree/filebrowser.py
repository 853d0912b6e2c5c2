"""Filesystem browser built on the tree: directories are listed lazily when opened."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from rich.style import Style
from rich.text import Text

from foldtree.core import (
    DEFAULT_KEYMAP,
    PLAIN_SYMBOLS,
    Action,
    Command,
    Key,
    KeyMap,
    Node,
    Symbols,
    Tree,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IconSet:
    folder: str
    file: str
    python: str


PLAIN_ICONS = IconSet(folder="📁", file="📄", python="🐍")
NERD_FONT_ICONS = IconSet(folder="\U000f024b", file="\U000f0214", python="\ue73c")

# Colors: entry kinds
TEXT_STYLE = Style(color="#FFFFFF")  # white
FOLDER_STYLE = Style(color="#FFCF00")  # yellow
PYTHON_STYLE = Style(color="#00FFFF")  # cyan
FILE_STYLE = Style(color="#7FFF7F")  # palegreen

SELECT_KEY = "enter"
REFRESH_KEY = "r"

Target = Union[Tree, Node]


def _entry_sort_key(entry: os.DirEntry[str]) -> tuple[bool, str]:
    try:
        is_dir = entry.is_dir()
    except OSError:
        is_dir = False
    return (not is_dir, entry.name.lower())


class FileBrowser:
    """
    Pick a path below ``directory``.

    The top level lists ``directory`` itself; each subdirectory is read the first
    time it is opened and cached until refreshed with ``r``. ``enter`` sets
    ``result`` to the focused path and asks the host to quit.
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        icons: IconSet = PLAIN_ICONS,
        keymap: KeyMap = DEFAULT_KEYMAP,
        symbols: Symbols = PLAIN_SYMBOLS,
        show_hidden: bool = True,
    ) -> None:
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise NotADirectoryError(f"Not a directory: {self.directory}")
        self.icons = icons
        self.show_hidden = show_hidden
        self.tree = Tree(keymap=keymap, symbols=symbols)
        self.result: Path | None = None
        self.quitting = False
        self.populate(self.directory, self.tree)

    def _make_node(self, entry: os.DirEntry[str]) -> Node:
        try:
            is_dir = entry.is_dir()
        except OSError:
            is_dir = False
        if is_dir:
            icon, icon_style = self.icons.folder, FOLDER_STYLE
        elif entry.name.endswith(".py"):
            icon, icon_style = self.icons.python, PYTHON_STYLE
        else:
            icon, icon_style = self.icons.file, FILE_STYLE
        return self.tree.new_node(
            entry.name,
            can_expand=is_dir,
            icon=lambda _node: icon,
            label_style=lambda _node: TEXT_STYLE,
            icon_style=lambda _node: icon_style,
            on_open=self._on_open,
            payload=Path(entry.path),
        )

    def _on_open(self, node: Node) -> None:
        # Children stay cached between opens; refresh clears them.
        if not node.child_ids and not self.populate(node.payload, node):
            self.tree.collapse(node)

    def populate(self, path: Path, target: Target) -> bool:
        """
        List ``path`` and attach one node per entry to ``target``.

        Returns:
            False if the directory could not be read; ``target`` is left untouched.
        """
        try:
            with os.scandir(path) as it:
                entries = [e for e in it if self.show_hidden or not e.name.startswith(".")]
        except OSError as e:
            logger.warning("could not list %s: %s", path, e)
            return False
        entries.sort(key=_entry_sort_key)
        target.attach_children(*(self._make_node(entry) for entry in entries))
        logger.debug("listed %s (%d entries)", path, len(entries))
        return True

    def selected_path(self) -> Path | None:
        focused = self.tree.focused
        if focused is None:
            return None
        return self.directory.joinpath(*focused.path)

    def refresh_focused(self) -> None:
        """Re-read the directory holding the focused entry; focus moves to that directory."""
        focused = self.tree.focused
        parent = focused.parent_node if focused is not None else None
        if parent is None:
            self.tree.refresh()
            self.populate(self.directory, self.tree)
            return
        parent.refresh()

    def update(self, msg: object) -> tuple[FileBrowser, Command | None]:
        if isinstance(msg, Key):
            if msg.symbol == SELECT_KEY:
                self.result = self.selected_path()
                logger.debug("selected %s", self.result)
                self.quitting = True
                return self, Command.QUIT
            if msg.symbol == REFRESH_KEY:
                self.refresh_focused()
                return self, None
            if self.tree.keymap.action_for(msg.symbol) is Action.QUIT:
                self.quitting = True
                return self, Command.QUIT
        _, cmd = self.tree.update(msg)
        return self, cmd

    def view(self) -> Text:
        if self.quitting:
            return Text()
        return self.tree.view()
