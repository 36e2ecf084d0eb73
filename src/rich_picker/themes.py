"""Configurable themes for rich_picker.

The Theme dataclass holds all configurable visual elements (colors, icons,
layout). Named themes can be selected with ``get_theme(name)``; the
``MODE_PICKER_THEME`` environment variable overrides the requested name.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Theme:
    """Visual theme for the picker.

    All colors use Rich markup format (e.g., "green", "bold cyan", "dim").

    Attributes:
        name: Theme identifier.
        accent_color: Cursor indicator and prompt.
        header_color: Source headers.
        match_color: Highlight for characters that matched the query.
        marked_color: Marked rows and the mark icon.
        dim_color: Secondary text (counts, hints, scroll indicators).
        info_color / warning_color / error_color: Notice levels.
        menu_accent_term: simple_term_menu color for the action menu.

        cursor_icon: Shown next to the current row.
        marked_icon: Shown before marked rows.
        scroll_up_icon / scroll_down_icon: More rows above/below.

        min_visible_rows: Minimum rows before scrolling.
        max_visible_rows: Cap for tall terminals.
        panel_padding: Lines reserved for prompt, header and footer.
    """

    name: str = "default"

    # Colors
    accent_color: str = "color(130)"
    header_color: str = "bold color(24)"
    match_color: str = "bold color(136)"
    marked_color: str = "color(28)"
    dim_color: str = "grey50"
    info_color: str = "color(24)"
    warning_color: str = "color(136)"
    error_color: str = "color(124)"
    menu_accent_term: str = "fg_yellow"

    # Icons
    cursor_icon: str = "❯"
    marked_icon: str = "●"
    scroll_up_icon: str = "↑"
    scroll_down_icon: str = "↓"

    # Layout
    min_visible_rows: int = 5
    max_visible_rows: int = 30
    panel_padding: int = 8

    def notice_color(self, level: str) -> str:
        return {
            "warning": self.warning_color,
            "error": self.error_color,
        }.get(level, self.info_color)


DEFAULT_THEME = Theme()

THEMES: dict[str, Theme] = {
    "default": DEFAULT_THEME,
    "plain": Theme(
        name="plain",
        accent_color="bold",
        header_color="bold underline",
        match_color="bold",
        marked_color="reverse",
        dim_color="dim",
        info_color="default",
        warning_color="bold",
        error_color="bold",
        cursor_icon=">",
        marked_icon="*",
        scroll_up_icon="^",
        scroll_down_icon="v",
    ),
    "nocturne": Theme(
        name="nocturne",
        accent_color="color(60)",
        menu_accent_term="fg_blue",
        header_color="bold color(25)",
        match_color="bold color(101)",
        marked_color="color(29)",
    ),
}


def _normalize_theme_key(value: str) -> str:
    return value.strip().lower().replace("_", "-")


def get_theme(name: str | None = None) -> Theme:
    """Return the named theme, honoring the MODE_PICKER_THEME override.

    Unknown names fall back to the default theme.
    """
    env_theme = os.environ.get("MODE_PICKER_THEME")
    key = env_theme or name
    if not key:
        return DEFAULT_THEME
    return THEMES.get(_normalize_theme_key(key), DEFAULT_THEME)
