"""Selection session state machine.

A SelectionSession owns everything that changes while the picker is open:
the query, each source's filtered view, the marks and the cursor. It is
UI-agnostic; the terminal front end in ``picker.py`` translates keys into
calls on this class.

States:
    OPEN         accepting edits, navigation and marks
    DISPATCHING  an action is running
    CLOSED       terminal; all per-session state released
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Sequence

from .dispatch import ActionDispatcher, DispatchResult, Notice, NoticeFn
from .errors import AllSourcesFailure, PickerError, SourceBuildFailure, UnknownAction
from .matcher import MatchResult, filter_candidates
from .sources import Source, SourceBuilder

logger = logging.getLogger(__name__)

Matcher = Callable[[Sequence[Any], str], list[MatchResult]]


class SessionState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    DISPATCHING = "dispatching"


@dataclass(frozen=True)
class Row:
    """A visible row: which source it belongs to and what matched."""

    source_index: int
    match: MatchResult

    @property
    def candidate_index(self) -> int:
        return self.match.index

    @property
    def value(self) -> Any:
        return self.match.candidate.value


def _builder_name(builder: SourceBuilder) -> str:
    name = getattr(builder, "source_id", None) or getattr(builder, "__name__", None)
    if name is None and hasattr(builder, "func"):
        name = getattr(builder.func, "__name__", None)
    return str(name or repr(builder))


class SelectionSession:
    """Interactive selection over one or more candidate sources."""

    def __init__(
        self,
        sources: Sequence[Source],
        *,
        notify: NoticeFn | None = None,
        matcher: Matcher = filter_candidates,
    ):
        if not sources:
            raise AllSourcesFailure([])
        names = [s.name for s in sources]
        if len(set(names)) != len(names):
            raise ValueError(f"Source names must be unique: {names}")

        self.sources: tuple[Source, ...] = tuple(sources)
        self.notices: list[Notice] = []
        self.build_failures: list[SourceBuildFailure] = []
        self.last_result: DispatchResult | None = None
        self.state = SessionState.OPEN
        self.query = ""
        self.cursor: tuple[int, int] | None = None
        self._notify_cb = notify
        self._matcher = matcher
        self._dispatcher = ActionDispatcher(self.notify)
        self._views: dict[int, list[MatchResult]] = {}
        self._marks: dict[int, set[int]] = {}
        self._refilter()

    @classmethod
    def open(
        cls,
        builders: Iterable[SourceBuilder],
        *,
        notify: NoticeFn | None = None,
        matcher: Matcher = filter_candidates,
    ) -> "SelectionSession":
        """Build every source and open a session over the ones that succeeded.

        A builder that raises, returns a non-Source, or reuses an earlier
        source name is dropped with a warning notice.

        Raises:
            AllSourcesFailure: If no source could be built.
        """
        sources: list[Source] = []
        failures: list[SourceBuildFailure] = []
        seen: set[str] = set()

        for builder in builders:
            name = _builder_name(builder)
            try:
                source = builder()
                if not isinstance(source, Source):
                    raise TypeError(f"builder returned {type(source).__name__}, not Source")
                if source.name in seen:
                    raise ValueError(f"duplicate source name '{source.name}'")
            except Exception as exc:
                failure = SourceBuildFailure(name, exc)
                logger.warning("%s", failure)
                failures.append(failure)
                continue
            seen.add(source.name)
            sources.append(source)

        if not sources:
            raise AllSourcesFailure(failures)

        session = cls(sources, notify=notify, matcher=matcher)
        session.build_failures = failures
        for failure in failures:
            session.notify(Notice("warning", str(failure)))
        return session

    # ── state ────────────────────────────────────────────────────────────

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    def _require_open(self) -> None:
        if self.state is not SessionState.OPEN:
            raise PickerError(f"Session is {self.state.value}")

    def notify(self, notice: Notice) -> None:
        """Record a notice and forward it to the notify callback."""
        self.notices.append(notice)
        if self._notify_cb is not None:
            self._notify_cb(notice)

    def source_index(self, name: str) -> int:
        for i, source in enumerate(self.sources):
            if source.name == name:
                return i
        raise KeyError(f"No source named '{name}'")

    def view(self, name: str) -> list[MatchResult]:
        """Filtered rows of the named source for the current query."""
        return list(self._views.get(self.source_index(name), []))

    def visible(self, name: str) -> list[str]:
        return [r.candidate.display for r in self.view(name)]

    def rows(self) -> list[Row]:
        """All visible rows, grouped by source in source order."""
        rows: list[Row] = []
        for si in range(len(self.sources)):
            rows.extend(Row(si, match) for match in self._views.get(si, []))
        return rows

    def current(self) -> Row | None:
        """Row under the cursor, or None when nothing matches."""
        if self.cursor is None:
            return None
        si, ci = self.cursor
        for match in self._views.get(si, []):
            if match.index == ci:
                return Row(si, match)
        return None

    def current_source(self) -> Source | None:
        row = self.current()
        return self.sources[row.source_index] if row else None

    # ── query editing ────────────────────────────────────────────────────

    def set_query(self, query: str) -> None:
        self._require_open()
        if query == self.query:
            return
        self.query = query
        self._refilter()

    def insert(self, text: str) -> None:
        self.set_query(self.query + text)

    def backspace(self) -> None:
        self.set_query(self.query[:-1])

    def clear_query(self) -> None:
        self.set_query("")

    def _refilter(self) -> None:
        self._views = {
            si: self._matcher(source.candidates, self.query)
            for si, source in enumerate(self.sources)
        }
        rows = self.rows()
        self.cursor = (rows[0].source_index, rows[0].candidate_index) if rows else None

    # ── navigation ───────────────────────────────────────────────────────

    def move(self, delta: int) -> None:
        """Move the cursor by ``delta`` rows, wrapping at both ends."""
        self._require_open()
        rows = self.rows()
        if not rows:
            return
        pos = self._cursor_position(rows)
        row = rows[(pos + delta) % len(rows)]
        self.cursor = (row.source_index, row.candidate_index)

    def next_source(self) -> None:
        """Jump to the first row of the next non-empty source."""
        self._require_open()
        rows = self.rows()
        if not rows:
            return
        current = rows[self._cursor_position(rows)].source_index
        count = len(self.sources)
        for step in range(1, count + 1):
            si = (current + step) % count
            view = self._views.get(si)
            if view:
                self.cursor = (si, view[0].index)
                return

    def _cursor_position(self, rows: list[Row]) -> int:
        for pos, row in enumerate(rows):
            if self.cursor == (row.source_index, row.candidate_index):
                return pos
        return 0

    # ── marks ────────────────────────────────────────────────────────────

    def is_marked(self, source_index: int, candidate_index: int) -> bool:
        return candidate_index in self._marks.get(source_index, set())

    @property
    def marked_count(self) -> int:
        return sum(len(m) for m in self._marks.values())

    def toggle_mark(self) -> bool:
        """Toggle the mark on the cursor row. Returns True if a mark changed."""
        self._require_open()
        row = self.current()
        if row is None:
            return False
        source = self.sources[row.source_index]
        if source.nomark:
            self.notify(Notice("info", f"{source.name} does not support marking"))
            return False
        marks = self._marks.setdefault(row.source_index, set())
        if row.candidate_index in marks:
            marks.discard(row.candidate_index)
        else:
            marks.add(row.candidate_index)
        return True

    def mark_all(self) -> int:
        """Mark every visible row of the cursor's source. Returns the mark count."""
        self._require_open()
        row = self.current()
        if row is None:
            return 0
        source = self.sources[row.source_index]
        if source.nomark:
            self.notify(Notice("info", f"{source.name} does not support marking"))
            return 0
        marks = self._marks.setdefault(row.source_index, set())
        marks.update(m.index for m in self._views.get(row.source_index, []))
        return len(marks)

    def unmark_all(self) -> None:
        self._require_open()
        self._marks.clear()

    def selected_values(self) -> list[Any]:
        """Values an action on the cursor's source would receive."""
        row = self.current()
        if row is None:
            return []
        return self._selection_for(row)

    def _selection_for(self, row: Row) -> list[Any]:
        si = row.source_index
        source = self.sources[si]
        if source.nomark:
            return [row.value]

        marks = self._marks.get(si)
        if not marks:
            return [row.value]

        ordered: list[int] = []
        for match in self._views.get(si, []):
            if match.index in marks:
                ordered.append(match.index)
        ordered.extend(sorted(marks.difference(ordered)))
        return [source.candidates[i].value for i in ordered]

    def _warn_foreign_marks(self, row: Row) -> None:
        others = [
            self.sources[i].name
            for i, marks in self._marks.items()
            if marks and i != row.source_index
        ]
        if others:
            self.notify(Notice(
                "warning",
                f"Ignoring marks in {', '.join(others)}: "
                "cross-source batch actions are unsupported",
            ))

    # ── actions ──────────────────────────────────────────────────────────

    def accept(self) -> DispatchResult | None:
        """Run the default action of the cursor's source and close."""
        return self._dispatch(None, from_menu=False)

    def run_action(self, label: str | None) -> DispatchResult | None:
        """Run a menu action on the current selection.

        Closes the session afterwards unless the action is the source's
        persistent action. Returns None when nothing ran.
        """
        return self._dispatch(label, from_menu=True)

    def _dispatch(self, label: str | None, *, from_menu: bool) -> DispatchResult | None:
        self._require_open()
        row = self.current()
        if row is None:
            self.notify(Notice("info", "No matching candidates"))
            return None

        source = self.sources[row.source_index]
        label = label or source.default_label
        try:
            action = source.get_action(label)
        except UnknownAction as exc:
            logger.warning("%s", exc)
            self.notify(Notice("error", str(exc)))
            return None

        self._warn_foreign_marks(row)
        values = self._selection_for(row)
        self.state = SessionState.DISPATCHING
        persistent = None if from_menu else False
        result = self._dispatcher.invoke(source, label, action, values, persistent=persistent)
        self.last_result = result
        if result.persistent:
            self.state = SessionState.OPEN
        else:
            self._close()
        return result

    def run_persistent(self) -> DispatchResult | None:
        """Run the persistent action on the cursor row; the session stays open."""
        self._require_open()
        row = self.current()
        if row is None:
            self.notify(Notice("info", "No matching candidates"))
            return None

        source = self.sources[row.source_index]
        action = source.persistent_action
        if action is None:
            self.notify(Notice("info", f"{source.name} has no persistent action"))
            return None

        label = next(
            (lbl for lbl, act in source.actions if act is action), "persistent action"
        )
        self.state = SessionState.DISPATCHING
        result = self._dispatcher.invoke(source, label, action, [row.value])
        self.last_result = result
        self.state = SessionState.OPEN
        return result

    def cancel(self) -> None:
        """Close without running anything."""
        if self.state is SessionState.CLOSED:
            return
        self._close()

    def _close(self) -> None:
        self.state = SessionState.CLOSED
        self.query = ""
        self.cursor = None
        self._views = {}
        self._marks = {}
