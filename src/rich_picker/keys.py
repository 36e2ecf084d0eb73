"""Keyboard input helpers for rich_picker.

Printable keys belong to the query, so every command lives on a control
key or a named key. The helpers replace repeated inline conditionals with
readable function calls.
"""

from __future__ import annotations

import readchar

CTRL_SPACE = "\x00"
CTRL_A = "\x01"
CTRL_C = "\x03"
CTRL_G = "\x07"
CTRL_N = "\x0e"
CTRL_O = "\x0f"
CTRL_P = "\x10"
CTRL_U = "\x15"
CTRL_Z = "\x1a"


def is_enter(key: str) -> bool:
    """Check if key is Enter/Return."""
    return key in (readchar.key.ENTER, "\r", "\n")


def is_escape(key: str) -> bool:
    """Check if key is Escape (handles terminal variations)."""
    return key in (readchar.key.ESC, "\x1b", "\x1b\x1b")


def is_cancel(key: str) -> bool:
    """Check if key closes the picker without acting (Esc, Ctrl+G, Ctrl+C)."""
    return is_escape(key) or key in (CTRL_G, CTRL_C)


def is_up(key: str) -> bool:
    """Check if key is up arrow or Ctrl+P."""
    return key in (readchar.key.UP, CTRL_P)


def is_down(key: str) -> bool:
    """Check if key is down arrow or Ctrl+N."""
    return key in (readchar.key.DOWN, CTRL_N)


def is_next_source(key: str) -> bool:
    return key == CTRL_O


def is_backspace(key: str) -> bool:
    """Check if key is backspace (handles terminal variations)."""
    return key in (readchar.key.BACKSPACE, "\x7f", "\b")


def is_clear_query(key: str) -> bool:
    return key == CTRL_U


def is_mark(key: str) -> bool:
    """Ctrl+Space toggles the mark on the current row."""
    return key == CTRL_SPACE


def is_mark_all(key: str) -> bool:
    return key == CTRL_A


def is_action_menu(key: str) -> bool:
    """Tab opens the action menu of the current source."""
    return key == "\t"


def is_persistent(key: str) -> bool:
    """Ctrl+Z runs the persistent action without closing."""
    return key == CTRL_Z


def is_query_char(key: str) -> bool:
    """Check if key should be appended to the query."""
    return len(key) == 1 and key.isprintable()
