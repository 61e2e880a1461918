"""Textual app hosting a single TreeView."""

from __future__ import annotations

from collections.abc import Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Footer, Header, Static

from apg_tree.config import TreeSettings, initial_expanded_ids
from apg_tree.models import TreeNode
from apg_tree.widgets.tree_view import TreeView


class TreeViewApp(App):
    """Browse a tree with APG tree view keyboard behaviour."""

    TITLE = "APG Tree"
    CSS = """
    #tree-scroll {
        height: 1fr;
        border: round $surface-lighten-2;
        border-title-align: left;
    }
    #tree-scroll:focus-within {
        border: round $accent;
        border-title-color: $accent;
    }
    #status-bar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $primary-background;
        color: $text;
    }
    """

    BINDINGS = [
        Binding("ctrl+e", "expand_all", "Expand all", priority=True),
        Binding("ctrl+u", "collapse_all", "Collapse all", priority=True),
    ]

    def __init__(
        self,
        nodes: Sequence[TreeNode],
        settings: TreeSettings | None = None,
        source_name: str = "",
    ) -> None:
        super().__init__()
        self.nodes = list(nodes)
        self.settings = settings or TreeSettings()
        self.source_name = source_name
        self.last_activated: str | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="tree-scroll"):
            yield TreeView(
                self.nodes,
                multiselectable=self.settings.multiselectable,
                default_expanded_ids=initial_expanded_ids(self.nodes, self.settings.expand_depth),
                type_ahead_timeout=self.settings.type_ahead_timeout,
                show_guides=self.settings.show_guides,
                id="tree",
            )
        yield Static("", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        scroll = self.query_one("#tree-scroll", VerticalScroll)
        mode = "multi-select" if self.settings.multiselectable else "single-select"
        scroll.border_title = f"{self.source_name or 'tree'} ({mode})"
        self.tree_view.focus()
        self._update_status_bar()

    @property
    def tree_view(self) -> TreeView:
        return self.query_one("#tree", TreeView)

    def _label_for(self, node_id: str | None) -> str:
        if node_id is None:
            return ""
        flat_node = self.tree_view.engine.get_node(node_id)
        return flat_node.node.label if flat_node else node_id

    def _update_status_bar(self) -> None:
        tree = self.tree_view
        selected = tree.selected_ids
        parts = [f"Focus: {self._label_for(tree.focused_id)}"]
        if selected:
            labels = ", ".join(self._label_for(i) for i in selected[:5])
            more = f" (+{len(selected) - 5})" if len(selected) > 5 else ""
            parts.append(f"Selected: {labels}{more}")
        else:
            parts.append("Selected: -")
        if self.last_activated:
            parts.append(f"Activated: {self._label_for(self.last_activated)}")
        self.query_one("#status-bar", Static).update(" │ ".join(parts))

    def on_tree_view_focus_moved(self, event: TreeView.FocusMoved) -> None:
        self._update_status_bar()

    def on_tree_view_selection_changed(self, event: TreeView.SelectionChanged) -> None:
        self._update_status_bar()

    def on_tree_view_expanded_changed(self, event: TreeView.ExpandedChanged) -> None:
        self._update_status_bar()

    def on_tree_view_activated(self, event: TreeView.Activated) -> None:
        self.last_activated = event.node_id
        self._update_status_bar()

    def action_expand_all(self) -> None:
        self.tree_view.expand_all()

    def action_collapse_all(self) -> None:
        self.tree_view.collapse_all()
