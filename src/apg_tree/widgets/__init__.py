"""Textual widgets for the tree view."""
