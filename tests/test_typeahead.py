"""Tests for type-ahead matching and its reset timer."""

import pytest

from apg_tree.engine import TreeViewEngine
from apg_tree.flatten import TreeIndex
from apg_tree.focus import FocusCursor
from apg_tree.models import KeyEvent, TreeNode
from apg_tree.timers import CooperativeScheduler, CooperativeTimer, ManualClock
from apg_tree.typeahead import TypeAheadMatcher

FRUITS = [
    TreeNode("apple", "Apple"),
    TreeNode("apricot", "Apricot"),
    TreeNode("avocado", "Avocado"),
    TreeNode("banana", "Banana"),
]

FILES = [
    TreeNode("readme", "readme.md"),
    TreeNode("report", "report.pdf"),
    TreeNode("resources", "resources"),
]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return CooperativeScheduler(clock)


def _matcher(nodes, scheduler, focused=None, timeout_ms=500):
    index = TreeIndex(nodes)
    focus = FocusCursor(index)
    focus.reset([focused] if focused else ())
    return TypeAheadMatcher(index, focus, scheduler, timeout_ms), focus


class LoopScheduler:
    """Only ``set_timer``, like a Textual widget; timers fire when told."""

    def __init__(self):
        self.timers: list[CooperativeTimer] = []

    def set_timer(self, delay, callback):
        timer = CooperativeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def fire_all(self):
        for timer in self.timers:
            if timer.active:
                timer.active = False
                timer.callback()


def _type(engine, chars):
    for ch in chars:
        engine.handle_key(KeyEvent(ch))


class TestMatching:
    def test_first_character_starts_after_focus(self, scheduler):
        matcher, focus = _matcher(FRUITS, scheduler, focused="apple")
        assert matcher.on_character("a") == "apricot"
        assert focus.focused_id == "apricot"

    def test_repeated_character_cycles(self, scheduler):
        matcher, focus = _matcher(FRUITS, scheduler, focused="banana")
        seen = [matcher.on_character("a") for _ in range(4)]
        assert seen == ["apple", "apricot", "avocado", "apple"]
        assert matcher.buffer == "a"

    def test_case_insensitive(self, scheduler):
        matcher, _ = _matcher(FRUITS, scheduler, focused="apple")
        assert matcher.on_character("B") == "banana"

    def test_prefix_search_starts_at_focus(self, scheduler):
        matcher, focus = _matcher(FILES, scheduler, focused="readme")
        assert matcher.on_character("r") == "report"
        assert matcher.on_character("e") == "report"
        assert matcher.on_character("s") == "resources"
        assert matcher.buffer == "res"
        assert focus.focused_id == "resources"

    def test_no_match_keeps_focus_and_buffer(self, scheduler):
        matcher, focus = _matcher(FRUITS, scheduler, focused="apple")
        assert matcher.on_character("z") is None
        assert focus.focused_id == "apple"
        assert matcher.buffer == "z"

    def test_disabled_nodes_skipped(self, scheduler):
        nodes = [TreeNode("apple", "Apple", disabled=True), TreeNode("apricot", "Apricot"),
                 TreeNode("banana", "Banana")]
        matcher, _ = _matcher(nodes, scheduler, focused="banana")
        assert matcher.on_character("a") == "apricot"

    def test_empty_tree(self, scheduler):
        matcher, _ = _matcher([], scheduler)
        assert matcher.on_character("a") is None
        assert scheduler.pending == 0

    def test_doubled_letter_cycles_instead_of_prefix(self, scheduler):
        nodes = [TreeNode("aardvark", "Aardvark"), TreeNode("abacus", "Abacus"),
                 TreeNode("banana", "Banana")]
        matcher, _ = _matcher(nodes, scheduler, focused="banana")
        assert matcher.on_character("a") == "aardvark"
        assert matcher.on_character("a") == "abacus"
        assert matcher.buffer == "a"
        assert matcher.on_character("b") == "abacus"
        assert matcher.buffer == "ab"


class TestTimer:
    def test_one_timer_pending_per_burst(self, scheduler):
        matcher, _ = _matcher(FRUITS, scheduler)
        matcher.on_character("a")
        matcher.on_character("p")
        assert scheduler.pending == 1
        assert matcher.timer_pending

    def test_buffer_cleared_after_timeout(self, clock, scheduler):
        matcher, _ = _matcher(FRUITS, scheduler, timeout_ms=100)
        matcher.on_character("a")
        clock.advance(0.05)
        scheduler.run_due()
        assert matcher.buffer == "a"
        clock.advance(0.06)
        scheduler.run_due()
        assert matcher.buffer == ""
        assert not matcher.timer_pending

    def test_keystroke_restarts_timeout(self, clock, scheduler):
        matcher, _ = _matcher(FRUITS, scheduler, timeout_ms=100)
        matcher.on_character("a")
        clock.advance(0.08)
        matcher.on_character("p")
        clock.advance(0.08)
        scheduler.run_due()
        assert matcher.buffer == "ap"

    def test_close_cancels_timer(self, scheduler):
        matcher, _ = _matcher(FRUITS, scheduler)
        matcher.on_character("a")
        matcher.close()
        assert scheduler.pending == 0
        assert matcher.buffer == ""


class TestEngineTypeAhead:
    def test_burst_then_timeout(self, clock, scheduler):
        engine = TreeViewEngine(FRUITS, scheduler=scheduler)
        engine.handle_key(KeyEvent("End"))
        engine.handle_key(KeyEvent("a"))
        assert engine.focused_id == "apple"
        clock.advance(0.1)
        engine.handle_key(KeyEvent("a"))
        assert engine.focused_id == "apricot"
        clock.advance(0.6)
        engine.handle_key(KeyEvent("b"))
        assert engine.focused_id == "banana"
        assert engine.type_ahead_buffer == "b"

    def test_new_burst_after_timeout(self, clock, scheduler):
        engine = TreeViewEngine(FILES, scheduler=scheduler, type_ahead_timeout=100)
        engine.handle_key(KeyEvent("r"))
        assert engine.focused_id == "report"
        clock.advance(0.15)
        engine.handle_key(KeyEvent("r"))
        assert engine.focused_id == "resources"

    def test_only_visible_rows_match(self, scheduler):
        nodes = [
            TreeNode("docs", "Documents", children=(TreeNode("report", "report.pdf"),)),
            TreeNode("readme", "readme.md"),
        ]
        engine = TreeViewEngine(nodes, scheduler=scheduler)
        _type(engine, "r")
        assert engine.focused_id == "readme"

    def test_does_not_select(self, scheduler):
        engine = TreeViewEngine(FRUITS, multiselectable=True, scheduler=scheduler)
        _type(engine, "b")
        assert engine.selected_ids == []
        assert engine.anchor_id == "banana"

    def test_focus_hook_called_on_match(self, scheduler):
        focused: list[str] = []
        engine = TreeViewEngine(FRUITS, scheduler=scheduler, focus_element_for=focused.append)
        _type(engine, "bz")
        assert focused == ["banana"]

    def test_prefix_match_on_focused_row_does_not_refocus(self, scheduler):
        focused: list[str] = []
        engine = TreeViewEngine(FILES, scheduler=scheduler, focus_element_for=focused.append)
        _type(engine, "re")
        assert engine.focused_id == "report"
        assert focused == ["report"]

    def test_event_loop_scheduler_without_polling(self):
        scheduler = LoopScheduler()
        engine = TreeViewEngine(FRUITS, scheduler=scheduler)
        _type(engine, "b")
        assert engine.type_ahead_buffer == "b"
        scheduler.fire_all()
        assert engine.type_ahead_buffer == ""

    def test_close_cancels_pending_timer(self, scheduler):
        engine = TreeViewEngine(FRUITS, scheduler=scheduler)
        _type(engine, "a")
        engine.close()
        assert scheduler.pending == 0
