"""Headless tree view engine.

Coordinates the flattened tree, expansion, selection, focus and type-ahead
and interprets keyboard and pointer events onto them. Rendering layers feed
events in, read :meth:`TreeViewEngine.node_state` back out, and implement the
``focus_element_for`` hook.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from apg_tree.expansion import ExpansionController
from apg_tree.flatten import TreeIndex, VisibleNodes
from apg_tree.focus import FocusCursor, FocusHook
from apg_tree.keyboard import RANGE_COMMANDS, Command, resolve_command
from apg_tree.models import FlatNode, KeyEvent, NodeState, TreeNode
from apg_tree.selection import SelectionController
from apg_tree.state import ChangeCallback
from apg_tree.timers import CooperativeScheduler, Scheduler
from apg_tree.typeahead import DEFAULT_TIMEOUT_MS, TypeAheadMatcher

logger = logging.getLogger(__name__)

ActivateCallback = Callable[[str], None]


class TreeViewEngine:
    """State machine behind an APG tree view.

    Preconditions (not validated): node ids are unique across the tree.
    Controlled ``expanded_ids``/``selected_ids`` are treated as the source of
    truth; commits are reported through the callbacks and only take effect
    once the caller pushes them back with :meth:`set_expanded_ids` /
    :meth:`set_selected_ids`.
    """

    def __init__(
        self,
        nodes: Sequence[TreeNode],
        *,
        multiselectable: bool = False,
        default_selected_ids: Iterable[str] = (),
        selected_ids: Iterable[str] | None = None,
        default_expanded_ids: Iterable[str] = (),
        expanded_ids: Iterable[str] | None = None,
        on_selection_change: ChangeCallback | None = None,
        on_expanded_change: ChangeCallback | None = None,
        on_activate: ActivateCallback | None = None,
        focus_element_for: FocusHook | None = None,
        type_ahead_timeout: int = DEFAULT_TIMEOUT_MS,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.multiselectable = multiselectable
        self.on_activate = on_activate
        self._scheduler: Scheduler = scheduler or CooperativeScheduler()

        self._index = TreeIndex()
        self._focus = FocusCursor(self._index, focus_element_for)
        self._expansion = ExpansionController(
            self._index,
            self._focus,
            initial=default_expanded_ids,
            controlled=expanded_ids,
            on_change=on_expanded_change,
        )
        self._index.rebuild(nodes, self._expansion.ids)
        self._selection = SelectionController(
            self._index,
            multiselectable,
            initial=default_selected_ids,
            controlled=selected_ids,
            on_change=on_selection_change,
        )
        self._type_ahead = TypeAheadMatcher(
            self._index, self._focus, self._scheduler, type_ahead_timeout
        )
        self._focus.reset(self._selection.ids)
        self._selection.anchor_id = self._focus.focused_id

        self._handlers: dict[Command, Callable[[FlatNode, int, KeyEvent], None]] = {
            Command.MOVE_NEXT: self._on_move_next,
            Command.MOVE_PREVIOUS: self._on_move_previous,
            Command.EXPAND_OR_ENTER: self._on_expand_or_enter,
            Command.COLLAPSE_OR_EXIT: self._on_collapse_or_exit,
            Command.MOVE_FIRST: self._on_move_first,
            Command.MOVE_LAST: self._on_move_last,
            Command.ACTIVATE: self._on_activate,
            Command.TOGGLE_SELECT: self._on_toggle_select,
            Command.EXPAND_SIBLINGS: self._on_expand_siblings,
            Command.SELECT_ALL: self._on_select_all,
            Command.TYPE_AHEAD: self._on_type_ahead,
        }

    # ── Queries ──────────────────────────────────────────────────

    @property
    def nodes(self) -> tuple[TreeNode, ...]:
        return self._index.nodes

    @property
    def visible_nodes(self) -> VisibleNodes:
        return self._index.visible

    @property
    def focused_id(self) -> str | None:
        return self._focus.focused_id

    @property
    def anchor_id(self) -> str | None:
        return self._selection.anchor_id

    @property
    def selected_ids(self) -> list[str]:
        return self._selection.ids.as_list()

    @property
    def expanded_ids(self) -> list[str]:
        return self._expansion.ids.as_list()

    @property
    def type_ahead_buffer(self) -> str:
        return self._type_ahead.buffer

    def get_node(self, node_id: str) -> FlatNode | None:
        return self._index.get(node_id)

    def is_expanded(self, node_id: str) -> bool:
        return self._expansion.is_expanded(node_id)

    def is_selected(self, node_id: str) -> bool:
        return self._selection.is_selected(node_id)

    def node_state(self, node_id: str) -> NodeState | None:
        flat_node = self._index.get(node_id)
        if flat_node is None:
            return None
        return NodeState(
            id=node_id,
            depth=flat_node.depth,
            tab_index=self._focus.tab_index(node_id),
            expanded=self.is_expanded(node_id) if flat_node.has_children else None,
            selected=self.is_selected(node_id),
            disabled=flat_node.disabled,
        )

    def node_states(self) -> list[NodeState]:
        """States for the visible rows, in display order."""
        return [self.node_state(fn.id) for fn in self._index.visible]  # type: ignore[misc]

    # ── Caller-driven updates ────────────────────────────────────

    def set_nodes(self, nodes: Sequence[TreeNode]) -> None:
        """Replace the input tree, keeping focus on a visible node."""
        self._index.rebuild(nodes, self._expansion.ids)
        self._focus.relocate_if_hidden()
        if self._index.get(self._selection.anchor_id) is None:
            self._selection.anchor_id = self._focus.focused_id

    def set_expanded_ids(self, ids: Iterable[str]) -> None:
        self._expansion.set_controlled(ids)
        self._focus.relocate_if_hidden()

    def set_selected_ids(self, ids: Iterable[str]) -> None:
        self._selection.set_controlled(ids)

    def sync_focus(self, node_id: str) -> None:
        """Platform focus landed on *node_id* (e.g. Tab into the tree)."""
        if node_id in self._index.visible:
            self._focus.sync(node_id)

    # ── Programmatic operations ──────────────────────────────────

    def expand(self, node_id: str) -> bool:
        changed = self._expansion.expand(node_id)
        self._focus.flush()
        return changed

    def collapse(self, node_id: str) -> bool:
        changed = self._expansion.collapse(node_id)
        self._focus.flush()
        return changed

    def expand_all(self) -> None:
        self._expansion.expand_all()
        self._focus.flush()

    def collapse_all(self) -> None:
        self._expansion.collapse_all()
        self._focus.flush()

    def close(self) -> None:
        """Cancel pending timers. The engine must not be used afterwards."""
        self._type_ahead.close()

    # ── Events ───────────────────────────────────────────────────

    def handle_key(self, event: KeyEvent) -> bool:
        """Interpret a key event. Returns True (and prevents default) if handled."""
        self._run_due_timers()
        visible = self._index.visible
        if len(visible) == 0:
            return False

        command = resolve_command(event, self.multiselectable)
        if command is None:
            return False

        index = self._focus.current_index
        current = visible[index]
        logger.debug("key %r -> %s on %s", event.key, command.value, current.id)
        self._handlers[command](current, index, event)
        event.prevent_default()
        self._focus.flush()
        return True

    def handle_click(self, node_id: str) -> bool:
        """Pointer activation: focus, toggle expansion, select, activate."""
        self._run_due_timers()
        flat_node = self._index.get(node_id)
        if flat_node is None or flat_node.disabled:
            return False

        self._focus.move_to(node_id)
        if flat_node.has_children:
            self._expansion.toggle(node_id)
        self._commit_selection(node_id)
        self._activate(node_id)
        self._focus.flush()
        return True

    # ── Command handlers ─────────────────────────────────────────

    def _move_with_range(self, target_id: str | None, command: Command, event: KeyEvent) -> None:
        if target_id is None or not self.multiselectable:
            return
        if event.shift and command in RANGE_COMMANDS:
            self._selection.extend_range(self._selection.anchor_id, target_id)
        else:
            self._selection.anchor_id = target_id

    def _on_move_next(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        self._move_with_range(self._focus.move_next(), Command.MOVE_NEXT, event)

    def _on_move_previous(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        self._move_with_range(self._focus.move_previous(), Command.MOVE_PREVIOUS, event)

    def _on_move_first(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        self._move_with_range(self._focus.move_first(), Command.MOVE_FIRST, event)

    def _on_move_last(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        self._move_with_range(self._focus.move_last(), Command.MOVE_LAST, event)

    def _on_expand_or_enter(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        if not current.has_children or current.disabled:
            return
        if not self.is_expanded(current.id):
            self._expansion.expand(current.id)
            return
        visible = self._index.visible
        if index + 1 < len(visible) and visible[index + 1].parent_id == current.id:
            child_id = self._focus.move_to_index(index + 1)
            self._move_with_range(child_id, Command.EXPAND_OR_ENTER, event)

    def _on_collapse_or_exit(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        if current.has_children and self.is_expanded(current.id) and not current.disabled:
            self._expansion.collapse(current.id)
        elif current.parent_id is not None:
            self._focus.move_to(current.parent_id)
            self._move_with_range(current.parent_id, Command.COLLAPSE_OR_EXIT, event)

    def _on_activate(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        if current.disabled:
            return
        self._commit_selection(current.id)
        self._activate(current.id)

    def _on_toggle_select(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        if current.disabled:
            return
        if not self.multiselectable:
            self._selection.replace_with_single(current.id)
            self._activate(current.id)
            return
        self._selection.toggle(current.id)
        if not event.ctrl:
            self._selection.anchor_id = current.id

    def _on_expand_siblings(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        self._expansion.expand_siblings(current.id)

    def _on_select_all(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        self._selection.select_all_visible()

    def _on_type_ahead(self, current: FlatNode, index: int, event: KeyEvent) -> None:
        matched = self._type_ahead.on_character(event.key)
        if matched is not None and self.multiselectable:
            self._selection.anchor_id = matched

    # ── Helpers ──────────────────────────────────────────────────

    def _commit_selection(self, node_id: str) -> None:
        if self.multiselectable:
            self._selection.toggle(node_id)
            self._selection.anchor_id = node_id
        else:
            self._selection.replace_with_single(node_id)

    def _activate(self, node_id: str) -> None:
        logger.debug("activate %s", node_id)
        if self.on_activate is not None:
            self.on_activate(node_id)

    def _run_due_timers(self) -> None:
        # Event-loop schedulers (Textual) fire their own timers.
        run_due = getattr(self._scheduler, "run_due", None)
        if run_due is not None:
            run_due()
