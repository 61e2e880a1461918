"""Data models for the APG tree view engine."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TreeNode:
    """A single node of the input tree. Immutable and owned by the caller."""

    id: str
    label: str
    children: tuple[TreeNode, ...] = ()
    disabled: bool = False

    @property
    def has_children(self) -> bool:
        return len(self.children) > 0

    def all_nodes(self) -> list[TreeNode]:
        """Return a flat list of this node and all descendants."""
        result = [self]
        for child in self.children:
            result.extend(child.all_nodes())
        return result


@dataclass(frozen=True)
class FlatNode:
    """A tree node annotated with its position in the flattened sequence."""

    node: TreeNode
    depth: int
    parent_id: str | None
    has_children: bool

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def disabled(self) -> bool:
        return self.node.disabled


@dataclass
class KeyEvent:
    """A keyboard event using DOM key names ("ArrowDown", "Enter", " ", "a")."""

    key: str
    shift: bool = False
    ctrl: bool = False
    meta: bool = False
    default_prevented: bool = field(default=False, compare=False)

    def prevent_default(self) -> None:
        self.default_prevented = True

    @property
    def command_modifier(self) -> bool:
        """Ctrl on most platforms, Cmd on macOS."""
        return self.ctrl or self.meta


@dataclass(frozen=True)
class NodeState:
    """Per-node metadata the renderer must keep in sync with the model."""

    id: str
    depth: int
    tab_index: int  # 0 on the focused node, -1 elsewhere
    expanded: bool | None  # None for leaves
    selected: bool
    disabled: bool

    @property
    def focused(self) -> bool:
        return self.tab_index == 0
