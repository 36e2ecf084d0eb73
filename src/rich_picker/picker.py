"""Interactive picker front end using Rich.Live.

Renders a SelectionSession as a flicker-free panel and feeds it keys read
with readchar. Action menus are shown with simple_term_menu.

Example:
    from rich_picker import InteractivePicker, SelectionSession, Source

    session = SelectionSession([
        Source("Fruits", ["apple", "banana"], actions=[("Eat", eat)]),
    ])
    result = InteractivePicker(session, title="Pick").show()

Keyboard controls:
    - Printable keys: edit the query (Backspace deletes, Ctrl+U clears)
    - Up/Down or Ctrl+P/Ctrl+N: Navigate (wraps)
    - Ctrl+O: Jump to the next source
    - Ctrl+Space: Toggle mark, Ctrl+A: mark all visible rows of the source
    - Enter: Default action, Tab: action menu, Ctrl+Z: persistent action
    - Esc/Ctrl+G/Ctrl+C: Quit
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator

import readchar
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel

from .dispatch import DispatchResult, Notice
from .keys import (
    is_action_menu,
    is_backspace,
    is_cancel,
    is_clear_query,
    is_down,
    is_enter,
    is_mark,
    is_mark_all,
    is_next_source,
    is_persistent,
    is_query_char,
    is_up,
)
from .session import SelectionSession
from .sources import Source
from .themes import DEFAULT_THEME, Theme

ActionChooser = Callable[[Source], "str | None"]

FOOTER_HINTS = (
    "↵ run · tab actions · C-z preview · C-spc mark · C-a mark all"
    " · C-o next source · esc quit"
)


def _calculate_visible_range(
    cursor: int, total: int, max_visible: int, scroll_offset: int
) -> tuple[int, int]:
    """Return (start, end) of the window that keeps ``cursor`` visible."""
    if total == 0:
        return 0, 0
    cursor = max(0, min(cursor, total - 1))
    if cursor < scroll_offset:
        scroll_offset = cursor
    elif cursor >= scroll_offset + max_visible:
        scroll_offset = cursor - max_visible + 1
    scroll_offset = max(0, min(scroll_offset, total - 1))
    return scroll_offset, min(scroll_offset + max_visible, total)


def highlight_matches(text: str, positions: tuple[int, ...], style: str) -> str:
    """Return Rich markup for ``text`` with matched positions styled."""
    if not positions:
        return escape(text)
    wanted = set(positions)
    parts: list[str] = []
    for i, char in enumerate(text):
        if i in wanted:
            parts.append(f"[{style}]{escape(char)}[/{style}]")
        else:
            parts.append(escape(char))
    return "".join(parts)


def choose_action_with_menu(source: Source, theme: Theme = DEFAULT_THEME) -> str | None:
    """Show the action menu of ``source`` and return the chosen label."""
    from simple_term_menu import TerminalMenu

    labels = source.action_labels
    menu = TerminalMenu(
        labels,
        title=f"Actions: {source.name}",
        menu_cursor_style=(theme.menu_accent_term, "bold"),
        menu_highlight_style=(theme.menu_accent_term, "bold"),
    )
    choice = menu.show()
    if choice is None:
        return None
    return labels[choice]


class InteractivePicker:
    """Keyboard-driven view over a SelectionSession.

    Args:
        session: Open session to drive.
        title: Panel title.
        console: Rich Console for output (auto-created if not provided).
        theme: Visual theme.
        choose_action: Callback returning the action label picked for a
            source, or None to cancel. Defaults to a simple_term_menu menu.
        prompt: Label shown before the query.
    """

    def __init__(
        self,
        session: SelectionSession,
        *,
        title: str = "",
        console: Console | None = None,
        theme: Theme | None = None,
        choose_action: ActionChooser | None = None,
        prompt: str = "pattern",
    ):
        self.session = session
        self.title = title
        self.console = console or Console(highlight=False)
        self.theme = theme or DEFAULT_THEME
        self.prompt = prompt
        self.result: DispatchResult | None = None
        self.scroll_offset = 0
        self._choose_action = choose_action or (
            lambda source: choose_action_with_menu(source, self.theme)
        )
        self._live: Live | None = None
        self._notice_mark = 0

    # ── input ────────────────────────────────────────────────────────────

    def handle_key(self, key: str) -> None:
        """Apply one key press to the session."""
        session = self.session
        self._notice_mark = len(session.notices)

        if is_cancel(key):
            session.cancel()
        elif is_enter(key):
            self._run(session.accept)
        elif is_action_menu(key):
            self._open_action_menu()
        elif is_persistent(key):
            with self._suspended():
                session.run_persistent()
        elif is_up(key):
            session.move(-1)
        elif is_down(key):
            session.move(+1)
        elif is_next_source(key):
            session.next_source()
        elif is_mark(key):
            if session.toggle_mark():
                session.move(+1)
        elif is_mark_all(key):
            session.mark_all()
        elif is_backspace(key):
            session.backspace()
        elif is_clear_query(key):
            session.clear_query()
        elif is_query_char(key):
            session.insert(key)

    def _run(self, dispatch: Callable[[], DispatchResult | None]) -> None:
        with self._suspended():
            result = dispatch()
        if result is not None and not result.persistent:
            self.result = result

    def _open_action_menu(self) -> None:
        source = self.session.current_source()
        if source is None:
            self.session.notify(Notice("info", "No matching candidates"))
            return
        with self._suspended():
            label = self._choose_action(source)
            if label is None:
                return
            result = self.session.run_action(label)
        if result is not None and not result.persistent:
            self.result = result

    @contextmanager
    def _suspended(self) -> Iterator[None]:
        """Stop the live display while an action owns the terminal."""
        live = self._live
        if live is not None:
            live.stop()
        try:
            yield
        finally:
            if live is not None and self.session.is_open:
                live.start()

    # ── rendering ────────────────────────────────────────────────────────

    def _max_visible(self) -> int:
        calculated = self.console.height - self.theme.panel_padding
        return max(self.theme.min_visible_rows, min(self.theme.max_visible_rows, calculated))

    def _build_lines(self) -> tuple[list[str], int]:
        """Return the list body lines and the index of the cursor line."""
        theme = self.theme
        session = self.session
        current = session.current()
        lines: list[str] = []
        cursor_line = 0

        for si, source in enumerate(session.sources):
            view = session.view(source.name)
            if not view:
                continue
            marked = sum(1 for m in view if session.is_marked(si, m.index))
            count = f"({len(view)}/{len(source.candidates)})"
            if marked:
                count += f" [{theme.marked_color}]{marked} marked[/{theme.marked_color}]"
            lines.append(
                f"[{theme.header_color}]{escape(source.name)}[/{theme.header_color}]"
                f"  [{theme.dim_color}]{count}[/{theme.dim_color}]"
            )

            for match in view:
                is_cur = (
                    current is not None
                    and current.source_index == si
                    and current.candidate_index == match.index
                )
                if is_cur:
                    cursor_line = len(lines)
                    prefix = f"[{theme.accent_color}]{theme.cursor_icon}[/{theme.accent_color}] "
                else:
                    prefix = "  "
                text = highlight_matches(match.candidate.display, match.positions, theme.match_color)
                if session.is_marked(si, match.index):
                    mark = f"[{theme.marked_color}]{theme.marked_icon}[/{theme.marked_color}] "
                    text = f"[{theme.marked_color}]{text}[/{theme.marked_color}]"
                else:
                    mark = "  "
                if is_cur:
                    text = f"[bold]{text}[/bold]"
                lines.append(f"{prefix}{mark}{text}")

        return lines, cursor_line

    def _notice_lines(self) -> list[str]:
        fresh = self.session.notices[self._notice_mark:]
        lines = []
        for notice in fresh[-3:]:
            color = self.theme.notice_color(notice.level)
            lines.append(f"[{color}]{escape(notice.message)}[/{color}]")
        return lines

    def render(self) -> Panel:
        """Render the picker as a Rich Panel."""
        theme = self.theme
        body, cursor_line = self._build_lines()

        out = [
            f"[{theme.accent_color}]{escape(self.prompt)}:[/{theme.accent_color}] "
            f"{escape(self.session.query)}█",
            f"[{theme.dim_color}]{'─' * 40}[/{theme.dim_color}]",
        ]

        if not body:
            out.append(f"[{theme.dim_color}](no matches)[/{theme.dim_color}]")
        else:
            max_visible = self._max_visible()
            start, end = _calculate_visible_range(
                cursor_line, len(body), max_visible, self.scroll_offset
            )
            self.scroll_offset = start
            if start > 0:
                out.append(
                    f"[{theme.dim_color}]  {theme.scroll_up_icon} {start} more[/{theme.dim_color}]"
                )
            out.extend(body[start:end])
            if end < len(body):
                out.append(
                    f"[{theme.dim_color}]  {theme.scroll_down_icon} "
                    f"{len(body) - end} more[/{theme.dim_color}]"
                )

        notices = self._notice_lines()
        if notices:
            out.append("")
            out.extend(notices)

        out.append("")
        out.append(f"[{theme.dim_color}]{FOOTER_HINTS}[/{theme.dim_color}]")

        return Panel(
            "\n".join(out),
            title=f"[bold]{escape(self.title)}[/bold]" if self.title else None,
            border_style=theme.accent_color,
        )

    def show(self) -> DispatchResult | None:
        """Display the picker and block until the session closes.

        Returns:
            The result of the action that closed the session, or None when
            the user quit without acting.
        """
        self._notice_mark = 0
        with Live(self.render(), console=self.console, refresh_per_second=20, transient=True) as live:
            self._live = live
            try:
                while self.session.is_open:
                    try:
                        key = readchar.readkey()
                    except (KeyboardInterrupt, EOFError):
                        self.session.cancel()
                        break
                    self.handle_key(key)
                    if self.session.is_open:
                        live.update(self.render())
            finally:
                self._live = None

        for notice in self.session.notices[self._notice_mark:]:
            if notice.level != "info":
                color = self.theme.notice_color(notice.level)
                self.console.print(f"[{color}]{escape(notice.message)}[/{color}]")
        return self.result
