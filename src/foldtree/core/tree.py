"""Tree container: node arena, expand/collapse state machine, focus navigation and scrolling."""

from __future__ import annotations

import itertools
import logging
import threading
import weakref
from typing import Any, Callable, Iterator, Sequence

from rich.text import Text

from foldtree.core.keys import (
    DEFAULT_KEYMAP,
    PLAIN_SYMBOLS,
    Action,
    Command,
    Key,
    KeyMap,
    Resize,
    Symbols,
)
from foldtree.core.node import (
    ROOT,
    Branch,
    Holder,
    IconFn,
    Node,
    NodeHook,
    NodeId,
    StyleFn,
)
from foldtree.core.render import render_window

logger = logging.getLogger(__name__)


class Tree:
    """
    Root container and navigation engine for a forest of nodes.

    The tree owns every node in an arena keyed by NodeId; nodes refer to their
    parent and children by handle only. Exactly one node has focus (none if the
    forest is empty). ``focused_line`` is the viewport row of the focused node and
    ``viewport_top`` the index, among visible rows, of the first row drawn.

    Every operation degrades to a no-op on misuse (empty tree, non-expandable
    node, unknown key) so the host loop can keep calling it.
    """

    def __init__(
        self,
        *,
        keymap: KeyMap = DEFAULT_KEYMAP,
        symbols: Symbols = PLAIN_SYMBOLS,
    ) -> None:
        self.keymap = keymap
        self.symbols = symbols
        self.root_ids: list[NodeId] = []
        self.focused_id: NodeId | None = None
        self.focused_line = 0
        self.viewport_top = 0
        self.width = 0
        self.height = 0
        self.initialized = False
        self._nodes: dict[NodeId, Node] = {}
        self._ids = itertools.count(1)
        # Guards child/root lists so a worker thread may populate lazily.
        self._lock = threading.RLock()

    # -- arena ---------------------------------------------------------------

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def new_node(
        self,
        name: str,
        can_expand: bool = False,
        children: Sequence[Node] = (),
        icon: IconFn | None = None,
        label_style: StyleFn | None = None,
        icon_style: StyleFn | None = None,
        on_open: NodeHook | None = None,
        on_close: NodeHook | None = None,
        payload: Any = None,
        *,
        on_select: NodeHook | None = None,
        on_focus: NodeHook | None = None,
        on_blur: NodeHook | None = None,
    ) -> Node:
        """
        Allocate a detached node in this tree's arena.

        Args:
            name: Display label.
            can_expand: Allow the node to be opened even before it has children
                (the lazy-load case).
            children: Nodes of this tree to attach right away.
            icon, label_style, icon_style: Rendering hooks.
            on_open, on_close: Called once per open/close transition.
            payload: Caller data, never interpreted here.
            on_select: Called when the focused node is activated.
            on_focus, on_blur: Called when the node gains or loses focus.

        Returns:
            The new node; attach it with ``attach_children`` to make it visible.
        """
        node = Node(
            id=NodeId(next(self._ids)),
            name=name,
            can_expand=can_expand,
            payload=payload,
            icon_fn=icon,
            icon_style_fn=icon_style,
            label_style_fn=label_style,
            on_open=on_open,
            on_close=on_close,
            on_select=on_select,
            on_focus=on_focus,
            on_blur=on_blur,
            _tree_ref=weakref.ref(self),
        )
        with self._lock:
            self._nodes[node.id] = node
        if children:
            node.attach_children(*children)
        return node

    def get(self, node_id: NodeId) -> Node | None:
        return self._nodes.get(node_id)

    def __contains__(self, node: object) -> bool:
        return isinstance(node, Node) and self._nodes.get(node.id) is node

    @property
    def roots(self) -> list[Node]:
        return self.items(ROOT)

    @property
    def focused(self) -> Node | None:
        if self.focused_id is None:
            return None
        return self._nodes.get(self.focused_id)

    # -- holder capabilities -------------------------------------------------

    def _child_ids(self, holder: Holder) -> list[NodeId]:
        if isinstance(holder, Branch):
            return self._nodes[holder.node_id].child_ids
        return self.root_ids

    def items(self, holder: Holder) -> list[Node]:
        """Return the nodes held by the tree root or by a branch node."""
        with self._lock:
            return [self._nodes[i] for i in self._child_ids(holder)]

    def parent_of(self, holder: Holder) -> Holder | None:
        """The holder above ``holder``; None for the root container (and detached nodes)."""
        if isinstance(holder, Branch):
            return self._nodes[holder.node_id].parent
        return None

    def path(self, holder: Holder) -> list[str]:
        """Names from the shallowest ancestor down to ``holder``; empty for the root."""
        if not isinstance(holder, Branch):
            return []
        node = self._nodes[holder.node_id]
        prefix = self.path(node.parent) if node.parent is not None else []
        return prefix + [node.name]

    def attach_children(self, *nodes: Node) -> Tree:
        """Append top-level nodes. The first node attached to an empty tree gets focus."""
        self.attach_to(ROOT, *nodes)
        return self

    def attach_to(self, holder: Holder, *nodes: Node) -> None:
        """
        Append ``nodes`` to the children of ``holder``.

        Attaching to a branch marks it expandable even when ``nodes`` is empty.
        A node already somewhere in the forest is moved, so its parent handle
        always matches its position.
        """
        with self._lock:
            if isinstance(holder, Branch):
                target = self._nodes.get(holder.node_id)
                if target is None:
                    logger.warning("attach to discarded node %s ignored", holder.node_id)
                    return
                target.can_expand = True
            if not nodes:
                return
            ancestry = set(self._ancestor_ids(holder))
            target_ids = self._child_ids(holder)
            for node in nodes:
                if node not in self:
                    logger.warning("node %r belongs to another tree; not attached", node.name)
                    continue
                if node.id in ancestry:
                    logger.warning("attaching %r below itself would form a cycle", node.name)
                    continue
                if node.parent is not None:
                    self._child_ids(node.parent).remove(node.id)
                node.parent = holder
                target_ids.append(node.id)
            logger.debug("attached %d node(s) under %s", len(nodes), self.path(holder) or "<root>")
            if self.focused_id is None and self.root_ids:
                self.focused_id = self.root_ids[0]
            self._refit_focus()

    def refresh(self) -> None:
        """Discard every top-level node."""
        self.refresh_holder(ROOT)

    def refresh_holder(self, holder: Holder) -> None:
        """
        Discard the children of ``holder`` and close it, keeping the holder itself.

        A focused node inside the discarded part hands focus to the holder (or,
        for the root, to nothing until new nodes arrive).
        """
        with self._lock:
            if isinstance(holder, Branch) and holder.node_id not in self._nodes:
                return
            child_ids = self._child_ids(holder)
            for child_id in child_ids:
                self._discard(child_id)
            child_ids.clear()
            if isinstance(holder, Branch):
                self._nodes[holder.node_id].is_open = False
            if self.focused_id is not None and self.focused_id not in self._nodes:
                self.focused_id = holder.node_id if isinstance(holder, Branch) else None
            self._refit_focus()

    def _discard(self, node_id: NodeId) -> None:
        node = self._nodes.pop(node_id)
        for child_id in node.child_ids:
            self._discard(child_id)
        node.child_ids = []
        node.parent = None
        node._tree_ref = None

    def _ancestor_ids(self, holder: Holder | None) -> Iterator[NodeId]:
        while isinstance(holder, Branch):
            yield holder.node_id
            holder = self._nodes[holder.node_id].parent

    # -- expand/collapse -----------------------------------------------------

    def expand(self, node: Node) -> bool:
        """Open an expandable, closed node and fire ``on_open``. Returns True on a transition."""
        with self._lock:
            if node not in self or not node.can_expand or node.is_open:
                return False
            node.is_open = True
        logger.debug("open %s", node.path)
        try:
            if node.on_open is not None:
                node.on_open(node)
        except Exception:
            logger.exception("on_open failed for %s", node.path)
            with self._lock:
                node.is_open = False
            raise
        finally:
            with self._lock:
                self._refit_focus()
        return True

    def collapse(self, node: Node) -> bool:
        """Close an open node and fire ``on_close``. Returns True on a transition."""
        with self._lock:
            if node not in self or not node.is_open:
                return False
            node.is_open = False
            if self.focused_id is not None and node.id in self._ancestor_ids(
                self._nodes[self.focused_id].parent
            ):
                self._set_focus(node)
            self._refit_focus()
        logger.debug("close %s", node.path)
        if node.on_close is not None:
            node.on_close(node)
        return True

    def toggle(self, node: Node) -> bool:
        if node.is_open:
            return self.collapse(node)
        return self.expand(node)

    # -- visibility ----------------------------------------------------------

    def walk_visible(self) -> Iterator[tuple[Node, int]]:
        """Yield (node, depth) for every visible node in render order."""
        stack = [(self._nodes[i], 0) for i in reversed(self.root_ids)]
        while stack:
            node, depth = stack.pop()
            yield node, depth
            if node.is_open:
                stack.extend((self._nodes[i], depth + 1) for i in reversed(node.child_ids))

    def visible_count(self) -> int:
        with self._lock:
            return sum(1 for _ in self.walk_visible())

    def _visible_row(self, node_id: NodeId) -> int | None:
        for row, (node, _) in enumerate(self.walk_visible()):
            if node.id == node_id:
                return row
        return None

    def _last_visible_descendant(self, node: Node) -> Node:
        while node.is_open and node.child_ids:
            node = self._nodes[node.child_ids[-1]]
        return node

    def _next_visible(self, node: Node) -> Node | None:
        if node.is_open and node.child_ids:
            return self._nodes[node.child_ids[0]]
        while node.parent is not None:
            siblings = self._child_ids(node.parent)
            position = siblings.index(node.id)
            if position + 1 < len(siblings):
                return self._nodes[siblings[position + 1]]
            if not isinstance(node.parent, Branch):
                return None
            node = self._nodes[node.parent.node_id]
        return None

    def _previous_visible(self, node: Node) -> Node | None:
        if node.parent is None:
            return None
        siblings = self._child_ids(node.parent)
        position = siblings.index(node.id)
        if position > 0:
            return self._last_visible_descendant(self._nodes[siblings[position - 1]])
        if isinstance(node.parent, Branch):
            return self._nodes[node.parent.node_id]
        return None

    # -- focus and scrolling -------------------------------------------------

    def _set_focus(self, node: Node) -> None:
        previous = self.focused
        if previous is node:
            return
        if previous is not None and previous.on_blur is not None:
            previous.on_blur(previous)
        self.focused_id = node.id
        logger.debug("focus %s", node.name)
        if node.on_focus is not None:
            node.on_focus(node)

    def _scroll_to_row(self, row: int) -> None:
        last_line = max(self.height - 1, 0)
        if self.viewport_top <= row <= self.viewport_top + last_line:
            self.focused_line = row - self.viewport_top
        elif row < self.viewport_top:
            self.viewport_top = row
            self.focused_line = 0
        else:
            self.focused_line = last_line
            self.viewport_top = row - last_line

    def _refit_focus(self) -> None:
        """Move focus out of closed or detached subtrees and line the viewport up with it."""
        focused = self.focused
        if focused is None:
            if self.root_ids:
                focused = self._nodes[self.root_ids[0]]
                self.focused_id = focused.id
            else:
                self.focused_id = None
                self.focused_line = 0
                self.viewport_top = 0
                return
        ancestors = list(self._ancestor_ids(focused.parent))
        if focused.parent is None or (ancestors and self._nodes[ancestors[-1]].parent is None):
            if not self.root_ids:
                self.focused_id = None
                self.focused_line = 0
                self.viewport_top = 0
                return
            self._set_focus(self._nodes[self.root_ids[0]])
        else:
            for ancestor_id in reversed(ancestors):
                if not self._nodes[ancestor_id].is_open:
                    self._set_focus(self._nodes[ancestor_id])
                    break
        row = self._visible_row(self.focused_id)
        if row is not None:
            self._scroll_to_row(row)

    def select_next(self) -> bool:
        """Focus the next visible row; no-op on the last one. Returns True if focus moved."""
        with self._lock:
            current = self.focused
            if current is None:
                return False
            target = self._next_visible(current)
            if target is None:
                return False
            if self.focused_line >= self.height - 1:
                self.viewport_top += 1
            else:
                self.focused_line += 1
            self._set_focus(target)
            return True

    def select_previous(self) -> bool:
        """Focus the previous visible row; no-op on the first one. Returns True if focus moved."""
        with self._lock:
            current = self.focused
            if current is None:
                return False
            target = self._previous_visible(current)
            if target is None:
                return False
            if self.focused_line <= 0:
                self.viewport_top = max(self.viewport_top - 1, 0)
            else:
                self.focused_line -= 1
            self._set_focus(target)
            return True

    def select_first(self) -> bool:
        with self._lock:
            if not self.root_ids:
                return False
            self._set_focus(self._nodes[self.root_ids[0]])
            self.focused_line = 0
            self.viewport_top = 0
            return True

    def select_last(self) -> bool:
        """Focus the deepest open last descendant of the last top-level node."""
        with self._lock:
            if not self.root_ids:
                return False
            self._set_focus(self._last_visible_descendant(self._nodes[self.root_ids[-1]]))
            self._scroll_to_row(self.visible_count() - 1)
            return True

    def select_parent(self) -> bool:
        """Step back up to the focused node's parent node, keeping scroll coupling."""
        with self._lock:
            current = self.focused
            if current is None or not isinstance(current.parent, Branch):
                return False
            parent_id = current.parent.node_id
            while self.focused_id != parent_id and self.select_previous():
                pass
            return True

    def page_down(self) -> bool:
        return self._repeat(self.select_next)

    def page_up(self) -> bool:
        return self._repeat(self.select_previous)

    def _repeat(self, step: Callable[[], bool]) -> bool:
        moved = False
        with self._lock:
            for _ in range(max(self.height - 1, 1)):
                if not step():
                    break
                moved = True
        return moved

    def toggle_focused(self) -> bool:
        focused = self.focused
        if focused is None:
            return False
        return self.toggle(focused)

    def activate(self) -> bool:
        """Run the focused node's ``on_select`` hook."""
        focused = self.focused
        if focused is None or focused.on_select is None:
            return False
        logger.debug("select %s", focused.name)
        focused.on_select(focused)
        return True

    def resize(self, width: int, height: int) -> None:
        with self._lock:
            self.width = max(width, 0)
            self.height = max(height, 0)
            self.initialized = True
            last_line = max(self.height - 1, 0)
            if self.focused_line > last_line:
                self.viewport_top += self.focused_line - last_line
                self.focused_line = last_line
            # Pull the window back up when it grew past the last visible row.
            top_limit = max(self.visible_count() - self.height, 0)
            if self.viewport_top > top_limit:
                self.focused_line += self.viewport_top - top_limit
                self.viewport_top = top_limit

    # -- host protocol -------------------------------------------------------

    def perform(self, action: Action) -> bool:
        """Apply a navigation action. QUIT is the host's business and does nothing here."""
        handlers = {
            Action.PREVIOUS: self.select_previous,
            Action.NEXT: self.select_next,
            Action.FIRST: self.select_first,
            Action.LAST: self.select_last,
            Action.TOGGLE: self.toggle_focused,
            Action.ACTIVATE: self.activate,
            Action.PAGE_UP: self.page_up,
            Action.PAGE_DOWN: self.page_down,
            Action.PARENT: self.select_parent,
        }
        handler = handlers.get(action)
        if handler is None:
            return False
        return handler()

    def update(self, msg: object) -> tuple[Tree, Command | None]:
        """Process one host message; returns the tree and an optional follow-up command."""
        if isinstance(msg, Resize):
            self.resize(msg.width, msg.height)
        elif isinstance(msg, Key):
            action = self.keymap.action_for(msg.symbol)
            if action is Action.QUIT:
                return self, Command.QUIT
            if action is not None:
                self.perform(action)
        return self, None

    def view(self) -> Text:
        return render_window(self)
