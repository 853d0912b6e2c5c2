"""Tree nodes and the two kinds of item holder (the tree root and a branch node)."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, NewType, Union

from rich.style import Style

if TYPE_CHECKING:
    from foldtree.core.tree import Tree

NodeId = NewType("NodeId", int)


@dataclass(frozen=True)
class RootContainer:
    """The tree itself, holding the top-level nodes. Never focusable."""


@dataclass(frozen=True)
class Branch:
    """A node acting as the holder of its children."""

    node_id: NodeId


Holder = Union[RootContainer, Branch]

ROOT = RootContainer()

IconFn = Callable[["Node"], str]
StyleFn = Callable[["Node"], Style]
NodeHook = Callable[["Node"], None]


@dataclass(eq=False)
class Node:
    """
    One entry in the hierarchy.

    Structure is stored as handles into the owning tree's arena: ``parent`` is a
    Holder and ``child_ids`` lists child handles in render order. Hooks are plain
    callables taking the node; the rendering hooks must not mutate it.
    """

    id: NodeId
    name: str
    can_expand: bool = False
    is_open: bool = False
    payload: Any = None
    parent: Holder | None = None
    child_ids: list[NodeId] = field(default_factory=list)
    icon_fn: IconFn | None = None
    icon_style_fn: StyleFn | None = None
    label_style_fn: StyleFn | None = None
    on_open: NodeHook | None = None
    on_close: NodeHook | None = None
    on_select: NodeHook | None = None
    on_focus: NodeHook | None = None
    on_blur: NodeHook | None = None
    _tree_ref: weakref.ref[Tree] | None = field(default=None, repr=False)

    @property
    def tree(self) -> Tree | None:
        """The arena this node lives in, or None once it has been discarded."""
        if self._tree_ref is None:
            return None
        return self._tree_ref()

    @property
    def holder(self) -> Branch:
        return Branch(self.id)

    @property
    def children(self) -> list[Node]:
        tree = self.tree
        if tree is None:
            return []
        return tree.items(self.holder)

    @property
    def parent_node(self) -> Node | None:
        """The parent node, or None for top-level and detached nodes."""
        tree = self.tree
        if tree is None or not isinstance(self.parent, Branch):
            return None
        return tree.get(self.parent.node_id)

    @property
    def path(self) -> list[str]:
        """Names from the shallowest ancestor down to this node."""
        tree = self.tree
        if tree is None:
            return [self.name]
        return tree.path(self.holder)

    def attach_children(self, *nodes: Node) -> Node:
        """Append children to this node; the node becomes expandable."""
        tree = self.tree
        if tree is not None:
            tree.attach_to(self.holder, *nodes)
        return self

    def refresh(self) -> None:
        """Discard all children and close, so the next open re-populates."""
        tree = self.tree
        if tree is not None:
            tree.refresh_holder(self.holder)

    def icon(self) -> str:
        if self.icon_fn is not None:
            return self.icon_fn(self)
        return ""

    def icon_style(self) -> Style:
        if self.icon_style_fn is not None:
            return self.icon_style_fn(self)
        return Style()

    def label_style(self) -> Style:
        if self.label_style_fn is not None:
            return self.label_style_fn(self)
        return Style()
