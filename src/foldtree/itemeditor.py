"""Record list editor: a tree of records beside a field dump of the focused one."""

from __future__ import annotations

import dataclasses
import inspect
import logging
from typing import Any, Callable

from rich.console import RenderableType
from rich.style import Style
from rich.table import Table
from rich.text import Text

from foldtree.core import (
    DEFAULT_KEYMAP,
    PLAIN_SYMBOLS,
    Action,
    Command,
    Key,
    KeyMap,
    Node,
    Resize,
    Symbols,
    Tree,
)

logger = logging.getLogger(__name__)

ADD_ENTRY_LABEL = "[Add entry]"
UNNAMED = "<unnamed>"
ADD_ENTRY_STYLE = Style(color="#00FFFF", bgcolor="#000030")


def _call_if_plain(value: Callable[..., Any]) -> tuple[bool, Any]:
    """Call ``value`` when it takes no required arguments; report whether it was called."""
    try:
        signature = inspect.signature(value)
    except (TypeError, ValueError):
        return False, None
    required = [
        p
        for p in signature.parameters.values()
        if p.default is p.empty and p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
    ]
    if required:
        return False, None
    return True, value()


def describe_fields(obj: Any) -> list[str]:
    """
    List ``name:value`` for each field of a record.

    Dataclass fields, dict items, or public instance attributes are listed in
    declaration order. Zero-argument callables (getters) are called and their
    result shown instead of the callable itself.
    """
    if obj is None:
        return []
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        items = [(f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj)]
    elif isinstance(obj, dict):
        items = [(str(k), v) for k, v in obj.items()]
    elif hasattr(obj, "__dict__"):
        items = [(k, v) for k, v in vars(obj).items() if not k.startswith("_")]
    else:
        return [str(obj)]

    results = []
    for name, value in items:
        if callable(value):
            called, result = _call_if_plain(value)
            if called:
                value = result
        results.append(f"{name}:{value}")
    return results


class ItemEditor:
    """
    Browse a flat list of records.

    The tree takes the left half of the width; the right half shows the fields of
    the focused record's payload. ``with_add_entry`` adds a synthetic first row
    whose activation appends a new record built by ``factory``.
    """

    def __init__(
        self,
        factory: Callable[[], Any] | None = None,
        *,
        keymap: KeyMap = DEFAULT_KEYMAP,
        symbols: Symbols = PLAIN_SYMBOLS,
    ) -> None:
        self.factory = factory
        self.tree = Tree(keymap=keymap, symbols=symbols)
        self.width = 0
        self.height = 0
        self.initialized = False
        self.quitting = False
        self._add_entry: Node | None = None

    def add_record(self, name: str, payload: Any = None) -> Node:
        node = self.tree.new_node(name, payload=payload)
        self.tree.attach_children(node)
        return node

    def with_add_entry(self, label: str = ADD_ENTRY_LABEL) -> ItemEditor:
        self._add_entry = self.tree.new_node(
            label,
            label_style=lambda _node: ADD_ENTRY_STYLE,
            on_select=self._add_new,
        )
        self.tree.attach_children(self._add_entry)
        return self

    def _add_new(self, _node: Node) -> None:
        payload = self.factory() if self.factory is not None else None
        node = self.add_record(UNNAMED, payload)
        logger.debug("added record %s", node.id)

    def records(self) -> list[Any]:
        """Payloads of every record row, in display order."""
        return [node.payload for node in self.tree.roots if node is not self._add_entry]

    def update(self, msg: object) -> tuple[ItemEditor, Command | None]:
        cmd: Command | None = None
        if isinstance(msg, Resize):
            if not self.initialized:
                cmd = Command.CLEAR_SCREEN
            self.initialized = True
            self.width = msg.width
            self.height = msg.height
            msg = Resize(msg.width // 2, msg.height)
        elif isinstance(msg, Key) and self.tree.keymap.action_for(msg.symbol) is Action.QUIT:
            self.quitting = True
            return self, Command.QUIT
        _, tree_cmd = self.tree.update(msg)
        return self, tree_cmd or cmd

    def view(self) -> RenderableType:
        if not self.initialized:
            return Text("not initialized")
        if self.quitting:
            return Text("Bye!")
        focused = self.tree.focused
        details = describe_fields(focused.payload) if focused is not None else []

        grid = Table.grid(padding=(0, 1))
        grid.add_column(width=max(self.width // 2, 1), no_wrap=True)
        grid.add_column()
        grid.add_row(self.tree.view(), Text("\n".join(details)))
        return grid
