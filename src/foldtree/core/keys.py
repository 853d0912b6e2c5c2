"""Key table, inbound messages and outbound commands for the tree model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Action(Enum):
    """Navigation and lifecycle actions a key can trigger."""

    PREVIOUS = "previous"
    NEXT = "next"
    FIRST = "first"
    LAST = "last"
    TOGGLE = "toggle"
    ACTIVATE = "activate"
    QUIT = "quit"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    PARENT = "parent"


class Command(Enum):
    """Follow-up request a model hands back to its host after an update."""

    QUIT = "quit"
    CLEAR_SCREEN = "clear_screen"


@dataclass(frozen=True)
class Resize:
    """The drawing area changed size."""

    width: int
    height: int


@dataclass(frozen=True)
class Key:
    """A key press, named the way the host names keys ("up", "j", "enter", "ctrl+c")."""

    symbol: str


_DEFAULT_BINDINGS: dict[str, Action] = {
    "up": Action.PREVIOUS,
    "k": Action.PREVIOUS,
    "ctrl+p": Action.PREVIOUS,
    "down": Action.NEXT,
    "j": Action.NEXT,
    "ctrl+n": Action.NEXT,
    "g": Action.FIRST,
    "home": Action.FIRST,
    "G": Action.LAST,
    "end": Action.LAST,
    " ": Action.TOGGLE,
    "space": Action.TOGGLE,
    ".": Action.TOGGLE,
    "enter": Action.ACTIVATE,
    "q": Action.QUIT,
    "ctrl+c": Action.QUIT,
    "pageup": Action.PAGE_UP,
    "K": Action.PAGE_UP,
    "pagedown": Action.PAGE_DOWN,
    "J": Action.PAGE_DOWN,
    "left": Action.PARENT,
    "h": Action.PARENT,
    "backspace": Action.PARENT,
}


@dataclass(frozen=True)
class KeyMap:
    """Maps key symbols to actions. Unknown symbols map to nothing."""

    bindings: dict[str, Action] = field(default_factory=lambda: dict(_DEFAULT_BINDINGS))

    def action_for(self, symbol: str) -> Action | None:
        return self.bindings.get(symbol)

    def keys_for(self, action: Action) -> list[str]:
        """Return every key bound to an action, in table order."""
        return [key for key, bound in self.bindings.items() if bound is action]

    def with_overrides(self, **overrides: Action | None) -> KeyMap:
        """
        Return a copy with some bindings replaced.

        Keyword names are key symbols; a value of None unbinds the key.
        Symbols that are not valid identifiers can be passed with ``**{"ctrl+x": ...}``.
        """
        bindings = dict(self.bindings)
        for symbol, action in overrides.items():
            if action is None:
                bindings.pop(symbol, None)
            else:
                bindings[symbol] = action
        return KeyMap(bindings)


DEFAULT_KEYMAP = KeyMap()


@dataclass(frozen=True)
class Symbols:
    """Expand indicator glyphs drawn in front of each row."""

    leaf: str
    closed: str
    open: str


PLAIN_SYMBOLS = Symbols(leaf=" ", closed="▸", open="▾")
# Material design chevrons from the nerd font symbol set.
NERD_FONT_SYMBOLS = Symbols(leaf=" ", closed="\U000f0142", open="\U000f0140")
