"""Tests for the key -> command table."""

import pytest

from apg_tree.keyboard import Command, resolve_command
from apg_tree.models import KeyEvent


@pytest.mark.parametrize("key,command", [
    ("ArrowDown", Command.MOVE_NEXT),
    ("ArrowUp", Command.MOVE_PREVIOUS),
    ("ArrowRight", Command.EXPAND_OR_ENTER),
    ("ArrowLeft", Command.COLLAPSE_OR_EXIT),
    ("Home", Command.MOVE_FIRST),
    ("End", Command.MOVE_LAST),
    ("Enter", Command.ACTIVATE),
    (" ", Command.TOGGLE_SELECT),
    ("*", Command.EXPAND_SIBLINGS),
])
def test_named_keys(key, command):
    assert resolve_command(KeyEvent(key), multiselectable=False) is command


class TestSelectAllChord:
    @pytest.mark.parametrize("key", ["a", "A"])
    def test_ctrl_a_multi(self, key):
        assert resolve_command(KeyEvent(key, ctrl=True), True) is Command.SELECT_ALL

    def test_cmd_a_multi(self):
        assert resolve_command(KeyEvent("a", meta=True), True) is Command.SELECT_ALL

    def test_ctrl_a_single_is_typed(self):
        assert resolve_command(KeyEvent("a", ctrl=True), False) is Command.TYPE_AHEAD


class TestPrintable:
    def test_letters_and_digits(self):
        assert resolve_command(KeyEvent("r"), False) is Command.TYPE_AHEAD
        assert resolve_command(KeyEvent("7"), False) is Command.TYPE_AHEAD

    def test_shifted_letter(self):
        assert resolve_command(KeyEvent("R", shift=True), False) is Command.TYPE_AHEAD

    def test_other_ctrl_chords_unhandled(self):
        assert resolve_command(KeyEvent("b", ctrl=True), True) is None
        assert resolve_command(KeyEvent("c", meta=True), False) is None

    @pytest.mark.parametrize("key", ["Tab", "Escape", "PageDown", "F5", "Shift"])
    def test_unmapped_keys(self, key):
        assert resolve_command(KeyEvent(key), True) is None
