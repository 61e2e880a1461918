"""Tree flattening and visible-row computation."""

from __future__ import annotations

from collections.abc import Collection, Iterator, Sequence
from dataclasses import dataclass, field

from apg_tree.models import FlatNode, TreeNode


def flatten_tree(
    nodes: Sequence[TreeNode], depth: int = 0, parent_id: str | None = None
) -> list[FlatNode]:
    """Flatten a tree into a pre-order list of FlatNode."""
    result: list[FlatNode] = []
    for node in nodes:
        result.append(FlatNode(node, depth, parent_id, node.has_children))
        if node.children:
            result.extend(flatten_tree(node.children, depth + 1, node.id))
    return result


def index_nodes(flat: Sequence[FlatNode]) -> dict[str, FlatNode]:
    """Build an id -> FlatNode lookup. Later duplicates win."""
    return {fn.id: fn for fn in flat}


def ancestor_ids(node_id: str, node_map: dict[str, FlatNode]) -> Iterator[str]:
    """Yield the parent chain of *node_id*, nearest first."""
    flat_node = node_map.get(node_id)
    parent_id = flat_node.parent_id if flat_node else None
    while parent_id is not None:
        yield parent_id
        parent = node_map.get(parent_id)
        parent_id = parent.parent_id if parent else None


@dataclass
class VisibleNodes:
    """The currently visible subsequence and its id -> index map."""

    nodes: list[FlatNode] = field(default_factory=list)
    index: dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, i: int) -> FlatNode:
        return self.nodes[i]

    def __iter__(self) -> Iterator[FlatNode]:
        return iter(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.index

    def index_of(self, node_id: str) -> int | None:
        return self.index.get(node_id)

    def ids(self) -> list[str]:
        return [fn.id for fn in self.nodes]


def compute_visible(
    flat: Sequence[FlatNode],
    expanded_ids: Collection[str],
    node_map: dict[str, FlatNode],
) -> VisibleNodes:
    """Filter *flat* down to the nodes whose ancestors are all expanded.

    Collapsed parents are collected while walking, so a hidden subtree is
    detected at its first collapsed ancestor.
    """
    visible = VisibleNodes()
    collapsed_parents: set[str] = set()

    for flat_node in flat:
        hidden = False
        parent_id = flat_node.parent_id
        while parent_id is not None:
            if parent_id in collapsed_parents or parent_id not in expanded_ids:
                hidden = True
                break
            parent = node_map.get(parent_id)
            parent_id = parent.parent_id if parent else None

        if hidden:
            continue
        visible.index[flat_node.id] = len(visible.nodes)
        visible.nodes.append(flat_node)
        if flat_node.has_children and flat_node.id not in expanded_ids:
            collapsed_parents.add(flat_node.id)

    return visible


class TreeIndex:
    """Arena over the flattened tree plus the derived visible rows.

    Rebuilt when the input tree changes; the visible rows are refreshed
    whenever the expansion set changes.
    """

    def __init__(self, nodes: Sequence[TreeNode] = (), expanded_ids: Collection[str] = ()) -> None:
        self.nodes: tuple[TreeNode, ...] = ()
        self.flat: list[FlatNode] = []
        self.node_map: dict[str, FlatNode] = {}
        self.visible = VisibleNodes()
        self.rebuild(nodes, expanded_ids)

    def rebuild(self, nodes: Sequence[TreeNode], expanded_ids: Collection[str]) -> None:
        self.nodes = tuple(nodes)
        self.flat = flatten_tree(self.nodes)
        self.node_map = index_nodes(self.flat)
        self.refresh(expanded_ids)

    def refresh(self, expanded_ids: Collection[str]) -> None:
        self.visible = compute_visible(self.flat, expanded_ids, self.node_map)

    def get(self, node_id: str | None) -> FlatNode | None:
        if node_id is None:
            return None
        return self.node_map.get(node_id)

    def is_enabled(self, node_id: str) -> bool:
        flat_node = self.node_map.get(node_id)
        return flat_node is not None and not flat_node.disabled

    def ancestors(self, node_id: str) -> Iterator[str]:
        return ancestor_ids(node_id, self.node_map)
