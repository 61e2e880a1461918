"""Key -> command table for the tree view."""

from __future__ import annotations

from enum import Enum

from apg_tree.models import KeyEvent


class Command(Enum):
    """Tree view actions a key can map to."""

    MOVE_NEXT = "move_next"
    MOVE_PREVIOUS = "move_previous"
    EXPAND_OR_ENTER = "expand_or_enter"
    COLLAPSE_OR_EXIT = "collapse_or_exit"
    MOVE_FIRST = "move_first"
    MOVE_LAST = "move_last"
    ACTIVATE = "activate"
    TOGGLE_SELECT = "toggle_select"
    EXPAND_SIBLINGS = "expand_siblings"
    SELECT_ALL = "select_all"
    TYPE_AHEAD = "type_ahead"


KEY_COMMANDS: dict[str, Command] = {
    "ArrowDown": Command.MOVE_NEXT,
    "ArrowUp": Command.MOVE_PREVIOUS,
    "ArrowRight": Command.EXPAND_OR_ENTER,
    "ArrowLeft": Command.COLLAPSE_OR_EXIT,
    "Home": Command.MOVE_FIRST,
    "End": Command.MOVE_LAST,
    "Enter": Command.ACTIVATE,
    " ": Command.TOGGLE_SELECT,
    "*": Command.EXPAND_SIBLINGS,
}

# Commands whose target may extend the selection range when Shift is held.
RANGE_COMMANDS = frozenset(
    {Command.MOVE_NEXT, Command.MOVE_PREVIOUS, Command.MOVE_FIRST, Command.MOVE_LAST}
)


def is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def resolve_command(event: KeyEvent, multiselectable: bool) -> Command | None:
    """Map a key event onto a Command, or None when the key is not handled.

    Ctrl/Cmd+A selects all in multi-select mode and is typed as "a" otherwise.
    Any other Ctrl/Cmd chord is left to the platform.
    """
    command = KEY_COMMANDS.get(event.key)
    if command is not None:
        return command
    if event.key in ("a", "A") and event.command_modifier:
        return Command.SELECT_ALL if multiselectable else Command.TYPE_AHEAD
    if is_printable(event.key) and not event.command_modifier:
        return Command.TYPE_AHEAD
    return None
