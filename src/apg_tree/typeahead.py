"""Type-ahead focus search over the visible rows."""

from __future__ import annotations

from apg_tree.flatten import TreeIndex
from apg_tree.focus import FocusCursor
from apg_tree.timers import Scheduler, Timer

DEFAULT_TIMEOUT_MS = 500


class TypeAheadMatcher:
    """Buffers typed characters and moves focus to the first label match.

    A burst of the same character cycles through matches; a growing
    multi-character buffer matches by prefix starting at the focused row.
    The buffer is cleared *timeout_ms* after the last keystroke.
    """

    def __init__(
        self,
        index: TreeIndex,
        focus: FocusCursor,
        scheduler: Scheduler,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self._index = index
        self._focus = focus
        self._scheduler = scheduler
        self.timeout_ms = max(0, timeout_ms)
        self._buffer = ""
        self._timer: Timer | None = None

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None

    def on_character(self, char: str) -> str | None:
        """Handle one typed character. Returns the id focused, if any.

        The character is appended before searching, so a miss leaves focus
        unchanged but keeps the character in the buffer until the timeout.
        """
        visible = self._index.visible
        count = len(visible)
        if count == 0:
            return None

        self._cancel_timer()
        self._buffer += char.lower()
        buffer = self._buffer
        current = self._focus.current_index

        if len(buffer) > 1 and buffer == buffer[0] * len(buffer):
            self._buffer = search = buffer[0]
            start = (current + 1) % count
        elif len(buffer) == 1:
            search = buffer
            start = (current + 1) % count
        else:
            search = buffer
            start = current

        matched: str | None = None
        for offset in range(count):
            flat_node = visible[(start + offset) % count]
            if flat_node.disabled:
                continue
            if flat_node.node.label.lower().startswith(search):
                matched = flat_node.id
                self._focus.move_to(matched)
                break

        self._timer = self._scheduler.set_timer(self.timeout_ms / 1000, self._expire)
        return matched

    def _expire(self) -> None:
        self._timer = None
        self._buffer = ""

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def reset(self) -> None:
        self._cancel_timer()
        self._buffer = ""

    def close(self) -> None:
        """Release the pending timer; called on teardown."""
        self.reset()
