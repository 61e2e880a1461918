"""Textual tree view widget driven by TreeViewEngine."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from rich.text import Text
from textual import events
from textual.containers import ScrollableContainer
from textual.geometry import Region
from textual.message import Message
from textual.widget import Widget

from apg_tree.engine import TreeViewEngine
from apg_tree.models import FlatNode, KeyEvent, NodeState, TreeNode
from apg_tree.typeahead import DEFAULT_TIMEOUT_MS

_TEXTUAL_KEYS: dict[str, str] = {
    "down": "ArrowDown",
    "up": "ArrowUp",
    "left": "ArrowLeft",
    "right": "ArrowRight",
    "home": "Home",
    "end": "End",
    "enter": "Enter",
    "space": " ",
}

FOLD_OPEN = "▼ "
FOLD_CLOSED = "▶ "
FOLD_LEAF = "  "

FOCUSED_STYLE = "reverse"
SELECTED_STYLE = "bold"
DISABLED_STYLE = "dim"


def key_event_from_textual(key: str, character: str | None = None) -> KeyEvent:
    """Translate a Textual key name ("shift+down", "ctrl+a", "A") to a KeyEvent."""
    *modifiers, base = key.split("+")
    ctrl = "ctrl" in modifiers
    meta = "meta" in modifiers or "super" in modifiers
    if base in _TEXTUAL_KEYS:
        name = _TEXTUAL_KEYS[base]
    elif character is not None and len(character) == 1 and character.isprintable():
        name = character
    else:
        name = base
    return KeyEvent(name, shift="shift" in modifiers, ctrl=ctrl, meta=meta)


class TreeView(Widget, can_focus=True):
    """A single focus stop presenting the tree; one row per visible node."""

    DEFAULT_CSS = """
    TreeView {
        width: 1fr;
        height: auto;
    }
    """

    class SelectionChanged(Message):
        """Emitted when the selection is committed."""

        def __init__(self, selected_ids: list[str]) -> None:
            super().__init__()
            self.selected_ids = selected_ids

    class ExpandedChanged(Message):
        """Emitted when a node is expanded or collapsed."""

        def __init__(self, expanded_ids: list[str]) -> None:
            super().__init__()
            self.expanded_ids = expanded_ids

    class Activated(Message):
        """Emitted when a node is activated (Enter, click, Space in single-select)."""

        def __init__(self, node_id: str) -> None:
            super().__init__()
            self.node_id = node_id

    class FocusMoved(Message):
        """Emitted when the focused row changes."""

        def __init__(self, node_id: str) -> None:
            super().__init__()
            self.node_id = node_id

    def __init__(
        self,
        nodes: Sequence[TreeNode] = (),
        *,
        multiselectable: bool = False,
        default_selected_ids: Iterable[str] = (),
        default_expanded_ids: Iterable[str] = (),
        type_ahead_timeout: int = DEFAULT_TIMEOUT_MS,
        show_guides: bool = True,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(id=id, classes=classes)
        self.show_guides = show_guides
        self.engine = TreeViewEngine(
            nodes,
            multiselectable=multiselectable,
            default_selected_ids=default_selected_ids,
            default_expanded_ids=default_expanded_ids,
            on_selection_change=self._on_engine_selection_change,
            on_expanded_change=self._on_engine_expanded_change,
            on_activate=self._on_engine_activate,
            focus_element_for=self._focus_element_for,
            type_ahead_timeout=type_ahead_timeout,
            scheduler=self,
        )

    # ── Engine callbacks ─────────────────────────────────────────

    def _on_engine_selection_change(self, selected_ids: list[str]) -> None:
        self.post_message(self.SelectionChanged(selected_ids))

    def _on_engine_expanded_change(self, expanded_ids: list[str]) -> None:
        self.post_message(self.ExpandedChanged(expanded_ids))

    def _on_engine_activate(self, node_id: str) -> None:
        self.post_message(self.Activated(node_id))

    def _focus_element_for(self, node_id: str) -> None:
        if not self.has_focus:
            self.focus()
        self.post_message(self.FocusMoved(node_id))
        index = self.engine.visible_nodes.index_of(node_id)
        if index is not None:
            self.call_after_refresh(self._scroll_row_visible, index)

    def _scroll_row_visible(self, index: int) -> None:
        parent = self.parent
        if isinstance(parent, ScrollableContainer):
            top = self.virtual_region.y + index
            parent.scroll_to_region(Region(0, top, 1, 1), animate=False)

    # ── Rendering ────────────────────────────────────────────────

    def _render_row(self, flat_node: FlatNode, state: NodeState) -> Text:
        row = Text("  " * state.depth)
        if self.show_guides:
            if state.expanded is None:
                row.append(FOLD_LEAF)
            else:
                row.append(FOLD_OPEN if state.expanded else FOLD_CLOSED)
        if self.engine.multiselectable:
            row.append("[x] " if state.selected else "[ ] ")
        elif state.selected:
            row.append("● ")
        label_start = len(row)
        row.append(flat_node.node.label)

        if state.disabled:
            row.stylize(DISABLED_STYLE)
        if state.selected:
            row.stylize(SELECTED_STYLE, label_start)
        if state.focused and self.has_focus:
            row.stylize(FOCUSED_STYLE)
        return row

    def render(self) -> Text:
        text = Text(no_wrap=True, overflow="ellipsis")
        for i, flat_node in enumerate(self.engine.visible_nodes):
            if i:
                text.append("\n")
            state = self.engine.node_state(flat_node.id)
            if state is not None:
                text.append_text(self._render_row(flat_node, state))
        return text

    # ── Events ───────────────────────────────────────────────────

    def on_key(self, event: events.Key) -> None:
        key_event = key_event_from_textual(event.key, event.character)
        if self.engine.handle_key(key_event):
            event.stop()
            event.prevent_default()
            self.refresh(layout=True)

    def on_click(self, event: events.Click) -> None:
        offset = event.get_content_offset(self)
        if offset is None:
            return
        visible = self.engine.visible_nodes
        if not 0 <= offset.y < len(visible):
            return
        event.stop()
        if self.engine.handle_click(visible[offset.y].id):
            self.refresh(layout=True)

    def on_focus(self) -> None:
        self.refresh()

    def on_blur(self) -> None:
        self.refresh()

    def on_unmount(self) -> None:
        self.engine.close()

    # ── Public API ───────────────────────────────────────────────

    @property
    def focused_id(self) -> str | None:
        return self.engine.focused_id

    @property
    def selected_ids(self) -> list[str]:
        return self.engine.selected_ids

    def update_data(self, nodes: Sequence[TreeNode]) -> None:
        self.engine.set_nodes(nodes)
        self.refresh(layout=True)

    def expand_all(self) -> None:
        self.engine.expand_all()
        self.refresh(layout=True)

    def collapse_all(self) -> None:
        self.engine.collapse_all()
        self.refresh(layout=True)
