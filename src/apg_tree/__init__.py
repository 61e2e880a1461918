"""Headless WAI-ARIA tree view engine with a Textual front end."""

from apg_tree.engine import TreeViewEngine
from apg_tree.keyboard import Command, resolve_command
from apg_tree.models import FlatNode, KeyEvent, NodeState, TreeNode

__version__ = "0.1.0"

__all__ = [
    "Command",
    "FlatNode",
    "KeyEvent",
    "NodeState",
    "TreeNode",
    "TreeViewEngine",
    "resolve_command",
]
