"""Tests for the selection session state machine."""

import pytest

from rich_picker.errors import AllSourcesFailure, PickerError, SourceBuildFailure
from rich_picker.session import SelectionSession, SessionState
from rich_picker.sources import Source


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, values):
        self.calls.append(list(values))


def boom(values):
    raise RuntimeError("kaput")


def make_source(name, candidates, **kwargs):
    kwargs.setdefault("actions", [("Go", Recorder())])
    return Source(name, candidates, **kwargs)


def builder_for(source):
    def build():
        return source

    build.__name__ = f"build_{source.name.lower()}"
    return build


def failing_builder():
    raise RuntimeError("no backend")


class TestOpen:
    def test_failing_builder_is_isolated(self):
        a = make_source("A", ["a1"])
        c = make_source("C", ["c1"])
        notices = []
        session = SelectionSession.open(
            [builder_for(a), failing_builder, builder_for(c)], notify=notices.append
        )
        assert [s.name for s in session.sources] == ["A", "C"]
        assert len(session.build_failures) == 1
        failure = session.build_failures[0]
        assert isinstance(failure, SourceBuildFailure)
        assert failure.builder_name == "failing_builder"
        assert [n.level for n in notices] == ["warning"]
        assert "no backend" in notices[0].message

    def test_all_builders_fail(self):
        with pytest.raises(AllSourcesFailure) as exc:
            SelectionSession.open([failing_builder, failing_builder])
        assert len(exc.value.failures) == 2

    def test_no_builders(self):
        with pytest.raises(AllSourcesFailure, match="No sources configured"):
            SelectionSession.open([])

    def test_non_source_return_is_a_failure(self):
        a = make_source("A", ["a1"])
        session = SelectionSession.open([builder_for(a), lambda: ["not", "a", "source"]])
        assert [s.name for s in session.sources] == ["A"]
        assert "not Source" in str(session.build_failures[0])

    def test_duplicate_name_is_a_failure(self):
        a = make_source("A", ["a1"])
        a2 = make_source("A", ["a2"])
        session = SelectionSession.open([builder_for(a), builder_for(a2)])
        assert len(session.sources) == 1
        assert session.sources[0].candidates[0].value == "a1"
        assert len(session.build_failures) == 1

    def test_builder_name_from_source_id(self):
        def build():
            raise RuntimeError("x")

        build.source_id = "inactive-minor"
        a = make_source("A", ["a1"])
        session = SelectionSession.open([builder_for(a), build])
        assert session.build_failures[0].builder_name == "inactive-minor"

    def test_empty_source_keeps_header_slot(self):
        session = SelectionSession([make_source("Empty", []), make_source("B", ["b"])])
        assert session.visible("Empty") == []
        assert session.current().value == "b"

    def test_duplicate_names_rejected_by_constructor(self):
        with pytest.raises(ValueError):
            SelectionSession([make_source("A", ["x"]), make_source("A", ["y"])])


class TestFiltering:
    def test_every_source_filtered_independently(self):
        session = SelectionSession([
            make_source("A", ["apple", "banana"]),
            make_source("B", ["grape", "pineapple"]),
        ])
        session.set_query("app")
        assert session.visible("A") == ["apple"]
        assert session.visible("B") == ["pineapple"]

    def test_cursor_resets_to_first_row(self):
        session = SelectionSession([make_source("A", ["abc", "abd", "xyz"])])
        session.move(2)
        session.insert("a")
        assert session.current().value == "abc"

    def test_no_matches_clears_cursor(self):
        session = SelectionSession([make_source("A", ["abc"])])
        session.set_query("zzz")
        assert session.current() is None
        assert session.rows() == []

    def test_backspace_and_clear(self):
        session = SelectionSession([make_source("A", ["abc", "xyz"])])
        session.insert("x")
        session.insert("y")
        assert session.query == "xy"
        session.backspace()
        assert session.query == "x"
        session.clear_query()
        assert session.query == ""
        assert session.visible("A") == ["abc", "xyz"]


class TestNavigation:
    def test_move_crosses_sources_and_wraps(self):
        session = SelectionSession([make_source("A", ["a1", "a2"]), make_source("B", ["b1"])])
        assert session.current().value == "a1"
        session.move(1)
        session.move(1)
        assert session.current().value == "b1"
        session.move(1)
        assert session.current().value == "a1"
        session.move(-1)
        assert session.current().value == "b1"

    def test_next_source_skips_empty_views(self):
        session = SelectionSession([
            make_source("A", ["a1", "a2"]),
            make_source("B", []),
            make_source("C", ["c1"]),
        ])
        session.next_source()
        assert session.current().value == "c1"
        session.next_source()
        assert session.current().value == "a1"

    def test_move_without_rows_is_noop(self):
        session = SelectionSession([make_source("A", ["a"])])
        session.set_query("zzz")
        session.move(1)
        session.next_source()
        assert session.current() is None


class TestMarks:
    def test_marked_values_dispatched_in_one_call(self):
        rec = Recorder()
        session = SelectionSession([make_source("S", ["x", "y", "z"], actions=[("Go", rec)])])
        session.toggle_mark()
        session.move(1)
        session.toggle_mark()
        result = session.accept()
        assert rec.calls == [["x", "y"]]
        assert result.values == ["x", "y"]

    def test_toggle_twice_unmarks(self):
        session = SelectionSession([make_source("S", ["x", "y"])])
        assert session.toggle_mark()
        assert session.toggle_mark()
        assert session.marked_count == 0

    def test_no_marks_uses_cursor(self):
        rec = Recorder()
        session = SelectionSession([make_source("S", ["x", "y"], actions=[("Go", rec)])])
        session.move(1)
        session.accept()
        assert rec.calls == [["y"]]

    def test_nomark_source_ignores_marking(self):
        rec = Recorder()
        session = SelectionSession([
            make_source("Major", ["text-mode"], actions=[("Describe", rec)], nomark=True),
        ])
        assert session.toggle_mark() is False
        assert session.marked_count == 0
        assert session.notices[-1].level == "info"
        session.accept()
        assert rec.calls == [["text-mode"]]

    def test_mark_all_visible(self):
        rec = Recorder()
        session = SelectionSession([
            make_source("S", ["apple", "apricot", "banana"], actions=[("Go", rec)]),
        ])
        session.set_query("ap")
        assert session.mark_all() == 2
        session.accept()
        assert rec.calls == [["apple", "apricot"]]

    def test_hidden_marks_still_dispatched(self):
        rec = Recorder()
        session = SelectionSession([
            make_source("S", ["apple", "banana", "cherry"], actions=[("Go", rec)]),
        ])
        session.move(1)
        session.toggle_mark()  # banana
        session.set_query("che")
        session.toggle_mark()  # cherry
        session.accept()
        assert rec.calls == [["cherry", "banana"]]

    def test_cross_source_marks_warn_and_only_cursor_source_runs(self):
        rec_a, rec_b = Recorder(), Recorder()
        session = SelectionSession([
            make_source("A", ["a1", "a2"], actions=[("Go", rec_a)]),
            make_source("B", ["b1", "b2"], actions=[("Go", rec_b)]),
        ])
        session.toggle_mark()  # a1, cursor moves nowhere by itself
        session.move(2)
        session.toggle_mark()  # b1
        session.accept()
        assert rec_a.calls == []
        assert rec_b.calls == [["b1"]]
        assert any(n.level == "warning" and "A" in n.message for n in session.notices)

    def test_selected_values_does_not_notify(self):
        session = SelectionSession([make_source("A", ["a1"]), make_source("B", ["b1"])])
        session.toggle_mark()
        session.move(1)
        assert session.selected_values() == ["b1"]
        assert session.notices == []

    def test_unmark_all(self):
        session = SelectionSession([make_source("S", ["x", "y"])])
        session.mark_all()
        session.unmark_all()
        assert session.marked_count == 0

    def test_selected_values_preview(self):
        session = SelectionSession([make_source("S", ["x", "y", "z"])])
        session.move(2)
        session.toggle_mark()
        session.move(-2)
        session.toggle_mark()
        assert session.selected_values() == ["x", "z"]


class TestDispatch:
    def test_default_action_closes(self):
        rec = Recorder()
        session = SelectionSession([make_source("S", ["x"], actions=[("Go", rec), ("Other", boom)])])
        result = session.accept()
        assert result.ok
        assert result.label == "Go"
        assert session.state is SessionState.CLOSED

    def test_failing_action_still_closes_with_error_notice(self):
        session = SelectionSession([make_source("S", ["x"], actions=[("Explode", boom)])])
        result = session.accept()
        assert not result.ok
        assert session.state is SessionState.CLOSED
        assert session.notices[-1].level == "error"
        assert session.last_result is result

    def test_run_named_action(self):
        go, other = Recorder(), Recorder()
        session = SelectionSession([make_source("S", ["x"], actions=[("Go", go), ("Other", other)])])
        session.run_action("Other")
        assert go.calls == []
        assert other.calls == [["x"]]

    def test_unknown_label_keeps_session_open(self):
        session = SelectionSession([make_source("S", ["x"])])
        assert session.run_action("Missing") is None
        assert session.is_open
        assert session.notices[-1].level == "error"
        assert "Missing" in session.notices[-1].message

    def test_no_match_accept_is_noop(self):
        rec = Recorder()
        session = SelectionSession([make_source("S", ["x"], actions=[("Go", rec)])])
        session.set_query("zzz")
        assert session.accept() is None
        assert session.is_open
        assert rec.calls == []

    def test_persistent_action_keeps_session_open(self):
        preview = Recorder()
        session = SelectionSession([
            make_source("S", ["x", "y"], actions=[("Go", Recorder())], persistent_action=preview),
        ])
        session.move(1)
        result = session.run_persistent()
        assert preview.calls == [["y"]]
        assert result.label == "persistent action"
        assert session.is_open
        assert session.current().value == "y"

    def test_failing_persistent_action_keeps_session_open(self):
        session = SelectionSession([
            make_source("S", ["x"], actions=[("Go", Recorder())], persistent_action=boom),
        ])
        result = session.run_persistent()
        assert not result.ok
        assert session.is_open

    def test_persistent_action_in_menu_keeps_session_open(self):
        preview = Recorder()
        session = SelectionSession([
            make_source(
                "S", ["x"], actions=[("Go", Recorder()), ("Preview", preview)],
                persistent_action=preview,
            ),
        ])
        result = session.run_action("Preview")
        assert result.persistent
        assert session.is_open
        assert session.run_persistent().label == "Preview"

    def test_accept_closes_even_when_default_is_persistent(self):
        preview = Recorder()
        session = SelectionSession([
            make_source("S", ["x"], actions=[("Preview", preview)], persistent_action=preview),
        ])
        result = session.accept()
        assert preview.calls == [["x"]]
        assert not result.persistent
        assert session.state is SessionState.CLOSED

    def test_missing_persistent_action_is_info(self):
        session = SelectionSession([make_source("S", ["x"])])
        assert session.run_persistent() is None
        assert session.notices[-1].level == "info"
        assert session.is_open


class TestCancel:
    def test_cancel_clears_state(self):
        session = SelectionSession([make_source("S", ["abc", "abd"])])
        session.insert("ab")
        session.toggle_mark()
        session.cancel()
        assert session.state is SessionState.CLOSED
        assert session.query == ""
        assert session.cursor is None
        assert session.marked_count == 0
        assert session.rows() == []

    def test_cancel_twice_is_harmless(self):
        session = SelectionSession([make_source("S", ["x"])])
        session.cancel()
        session.cancel()
        assert session.state is SessionState.CLOSED

    def test_closed_session_rejects_edits(self):
        session = SelectionSession([make_source("S", ["x"])])
        session.cancel()
        with pytest.raises(PickerError):
            session.insert("a")
        with pytest.raises(PickerError):
            session.accept()
