"""Textual host for tree models: feeds resize and key events in, draws the model's view."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from rich.console import RenderableType
from textual import events
from textual.app import App, ComposeResult
from textual.widget import Widget
from textual.widgets import Header, Static

from foldtree.core import Command, Key, Resize

logger = logging.getLogger(__name__)

DEFAULT_HINT = (
    "[dim]↑/↓ j/k[/] move  ·  [dim]g/G[/] first/last  ·  [dim]Space[/] open/close  ·  "
    "[dim]Enter[/] select  ·  [dim]q[/] quit"
)


class TreeModel(Protocol):
    """Anything that takes host messages and renders itself (Tree, FileBrowser, ItemEditor)."""

    def update(self, msg: object) -> tuple[Any, Command | None]: ...

    def view(self) -> RenderableType: ...


def key_symbol(key: str, character: str | None) -> str:
    """Name a key the way the key table does: the printable character, else Textual's key name."""
    if character is not None and len(character) == 1 and character.isprintable():
        return character
    return key


class TreeView(Widget, can_focus=True):
    """Widget that drives a tree model from Textual events."""

    DEFAULT_CSS = """
    TreeView {
        height: 1fr;
    }
    """

    def __init__(self, model: TreeModel, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.model = model

    def render(self) -> RenderableType:
        return self.model.view()

    def on_resize(self, event: events.Resize) -> None:
        self.send_to_model(Resize(event.size.width, event.size.height))

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.send_to_model(Key(key_symbol(event.key, event.character)))

    def send_to_model(self, msg: object) -> Command | None:
        """Hand one message to the model and act on the command it returns."""
        _, cmd = self.model.update(msg)
        if cmd is Command.QUIT:
            logger.debug("model asked to quit")
            self.app.exit(getattr(self.model, "result", None))
        elif cmd is Command.CLEAR_SCREEN:
            self.refresh(layout=True)
        self.refresh()
        return cmd


class TreeApp(App[Any]):
    """Terminal UI around a single tree model. ``run()`` returns the model's result, if any."""

    TITLE = "foldtree"

    DEFAULT_CSS = """
    #hint {
        height: auto;
        padding: 0 1;
        color: $text-muted;
    }
    """

    def __init__(
        self,
        model: TreeModel,
        *,
        title: str | None = None,
        hint: str = DEFAULT_HINT,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._model = model
        self._title = title
        self._hint = hint

    @property
    def model(self) -> TreeModel:
        return self._model

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        yield TreeView(self._model, id="tree_view")
        yield Static(self._hint, id="hint", markup=True)

    def on_mount(self) -> None:
        if self._title:
            self.sub_title = self._title
        self.query_one("#tree_view", TreeView).focus()
