"""Single- and multi-select selection with a range anchor."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from apg_tree.flatten import TreeIndex
from apg_tree.state import ChangeCallback, IdSet

logger = logging.getLogger(__name__)


class SelectionController:
    """Owns the selected ids and the anchor used for Shift range extension.

    Moving focus never changes the selection; only the explicit commit
    operations below do.
    """

    def __init__(
        self,
        index: TreeIndex,
        multiselectable: bool = False,
        initial: Iterable[str] = (),
        controlled: Iterable[str] | None = None,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self._index = index
        self.multiselectable = multiselectable
        if controlled is None:
            initial = self._valid_initial(initial)
        self._ids = IdSet(initial, controlled, on_change)
        self.anchor_id: str | None = None

    def _valid_initial(self, ids: Iterable[str]) -> list[str]:
        valid = [i for i in dict.fromkeys(ids) if self._index.is_enabled(i)]
        if not self.multiselectable:
            return valid[:1]
        return valid

    @property
    def ids(self) -> IdSet:
        return self._ids

    def is_selected(self, node_id: str) -> bool:
        return node_id in self._ids

    def _commit(self, new_ids: Iterable[str]) -> None:
        committed = self._ids.commit(new_ids)
        logger.debug("selected ids -> %s", committed)

    def toggle(self, node_id: str) -> bool:
        if not self._index.is_enabled(node_id):
            return False
        if not self.multiselectable:
            self._commit([node_id])
        elif node_id in self._ids:
            self._commit(i for i in self._ids if i != node_id)
        else:
            self._commit([*self._ids, node_id])
        return True

    def replace_with_single(self, node_id: str) -> bool:
        if not self._index.is_enabled(node_id):
            return False
        self._commit([node_id])
        return True

    def extend_range(self, anchor_id: str | None, target_id: str) -> bool:
        """Add every enabled visible node between anchor and target inclusive.

        Endpoints that are not visible count as index 0. Never removes ids.
        """
        if not self.multiselectable:
            return False
        visible = self._index.visible
        anchor_index = visible.index_of(anchor_id) if anchor_id is not None else None
        target_index = visible.index_of(target_id)
        anchor_index = anchor_index or 0
        target_index = target_index or 0
        start, end = min(anchor_index, target_index), max(anchor_index, target_index)

        new_ids = dict.fromkeys(self._ids)
        for flat_node in visible.nodes[start : end + 1]:
            if not flat_node.disabled:
                new_ids[flat_node.id] = None
        self._commit(new_ids)
        return True

    def select_all_visible(self) -> bool:
        if not self.multiselectable:
            return False
        self._commit(fn.id for fn in self._index.visible if not fn.disabled)
        return True

    def set_controlled(self, ids: Iterable[str]) -> None:
        self._ids.set_controlled(ids)
