"""Roving-tabindex focus cursor."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from apg_tree.flatten import TreeIndex

logger = logging.getLogger(__name__)

FocusHook = Callable[[str], None]


class FocusCursor:
    """Owns the single focused id of the tree.

    Moves are recorded as a pending request; :meth:`flush` applies the
    platform focus side effect once the event's model changes are committed.
    """

    def __init__(self, index: TreeIndex, focus_element_for: FocusHook | None = None) -> None:
        self._index = index
        self._focus_element_for = focus_element_for
        self._focused_id: str | None = None
        self._pending: str | None = None

    @property
    def focused_id(self) -> str | None:
        return self._focused_id

    @property
    def current_index(self) -> int:
        """Visible index of the focused node, 0 when it is not visible."""
        if self._focused_id is None:
            return 0
        index = self._index.visible.index_of(self._focused_id)
        return index if index is not None else 0

    def tab_index(self, node_id: str) -> int:
        return 0 if node_id == self._focused_id else -1

    def reset(self, preferred: Iterable[str] = ()) -> None:
        """Pick the initial focus without requesting platform focus.

        Prefers the first visible enabled id of *preferred*, then the first
        visible enabled node, then the first visible node.
        """
        visible = self._index.visible
        for node_id in preferred:
            if node_id in visible and self._index.is_enabled(node_id):
                self._focused_id = node_id
                return
        for flat_node in visible:
            if not flat_node.disabled:
                self._focused_id = flat_node.id
                return
        self._focused_id = visible[0].id if len(visible) else None

    def move_to(self, node_id: str) -> None:
        if node_id == self._focused_id:
            return
        self._focused_id = node_id
        self._pending = node_id

    def move_to_index(self, index: int) -> str | None:
        """Focus the visible row at *index*, clamped to the first and last rows."""
        visible = self._index.visible
        if len(visible) == 0:
            return None
        node_id = visible[max(0, min(index, len(visible) - 1))].id
        self.move_to(node_id)
        return node_id

    def move_next(self) -> str | None:
        index = self.current_index
        if index >= len(self._index.visible) - 1:
            return None
        return self.move_to_index(index + 1)

    def move_previous(self) -> str | None:
        index = self.current_index
        if index <= 0:
            return None
        return self.move_to_index(index - 1)

    def move_first(self) -> str | None:
        return self.move_to_index(0)

    def move_last(self) -> str | None:
        return self.move_to_index(len(self._index.visible) - 1)

    def sync(self, node_id: str) -> None:
        """Record focus that the platform already moved (pointer, Tab)."""
        self._focused_id = node_id

    def relocate_if_hidden(self) -> bool:
        """Move focus to the nearest visible ancestor when it became hidden.

        Used after caller-driven changes, so no platform focus is requested.
        """
        focused = self._focused_id
        visible = self._index.visible
        if focused is not None and focused in visible:
            return False
        if focused is not None and focused in self._index.node_map:
            for ancestor_id in self._index.ancestors(focused):
                if ancestor_id in visible:
                    logger.debug("focus %s hidden, relocated to %s", focused, ancestor_id)
                    self._focused_id = ancestor_id
                    return True
        self.reset()
        return self._focused_id != focused

    def flush(self) -> None:
        """Apply the pending platform focus request, if any."""
        target = self._pending
        self._pending = None
        if target is not None and self._focus_element_for is not None:
            self._focus_element_for(target)
