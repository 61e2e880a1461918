"""Expand/collapse state of parent nodes."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from apg_tree.flatten import TreeIndex
from apg_tree.focus import FocusCursor
from apg_tree.state import ChangeCallback, IdSet

logger = logging.getLogger(__name__)


class ExpansionController:
    """Owns the expansion set and keeps focus on a visible node on collapse."""

    def __init__(
        self,
        index: TreeIndex,
        focus: FocusCursor,
        initial: Iterable[str] = (),
        controlled: Iterable[str] | None = None,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self._index = index
        self._focus = focus
        self._ids = IdSet(initial, controlled, on_change)

    @property
    def ids(self) -> IdSet:
        return self._ids

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._ids

    def _can_toggle(self, node_id: str) -> bool:
        flat_node = self._index.get(node_id)
        return flat_node is not None and flat_node.has_children and not flat_node.disabled

    def _commit(self, new_ids: Iterable[str]) -> None:
        committed = self._ids.commit(new_ids)
        logger.debug("expanded ids -> %s", committed)
        self._index.refresh(self._ids)

    def expand(self, node_id: str) -> bool:
        if not self._can_toggle(node_id) or node_id in self._ids:
            return False
        self._commit([*self._ids, node_id])
        return True

    def collapse(self, node_id: str) -> bool:
        if not self._can_toggle(node_id) or node_id not in self._ids:
            return False
        focused = self._focus.focused_id
        self._commit(i for i in self._ids if i != node_id)
        if focused is not None and node_id in self._index.ancestors(focused):
            self._focus.move_to(node_id)
        return True

    def toggle(self, node_id: str) -> bool:
        if node_id in self._ids:
            return self.collapse(node_id)
        return self.expand(node_id)

    def expand_siblings(self, node_id: str) -> None:
        """Expand every enabled parent sharing *node_id*'s parent."""
        flat_node = self._index.get(node_id)
        if flat_node is None:
            return
        new_ids = dict.fromkeys(self._ids)
        for sibling in self._index.flat:
            if sibling.parent_id == flat_node.parent_id and sibling.has_children and not sibling.disabled:
                new_ids[sibling.id] = None
        self._commit(new_ids)

    def expand_all(self) -> None:
        new_ids = dict.fromkeys(self._ids)
        for flat_node in self._index.flat:
            if flat_node.has_children and not flat_node.disabled:
                new_ids[flat_node.id] = None
        self._commit(new_ids)

    def collapse_all(self) -> None:
        """Collapse every enabled parent; focus moves to its root ancestor."""
        kept = [i for i in self._ids if not self._can_toggle(i)]
        if len(kept) == len(self._ids):
            return
        focused = self._focus.focused_id
        self._commit(kept)
        if focused is None or focused in self._index.visible:
            return
        for ancestor_id in self._index.ancestors(focused):
            if ancestor_id in self._index.visible:
                self._focus.move_to(ancestor_id)
                break

    def set_controlled(self, ids: Iterable[str]) -> None:
        self._ids.set_controlled(ids)
        self._index.refresh(self._ids)
