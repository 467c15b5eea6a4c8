import pytest

from conftest import DAY, FailingSink, FakeSink, at, timed
from daygrid.core import UndoStack, execute_undo
from daygrid.domain import CreateUndo, DeleteUndo, EditUndo, EventPatch, MoveUndo, UndoKind


def test_stack_keeps_only_the_most_recent_entries():
    stack = UndoStack(limit=10)
    for index in range(13):
        stack.push(CreateUndo(event_id=f"e{index}"))

    assert len(stack) == 10
    assert [entry.event_id for entry in stack.entries()][0] == "e3"
    assert stack.pop().event_id == "e12"


def test_pop_on_empty_stack_returns_none():
    assert UndoStack().pop() is None


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        UndoStack(limit=0)


def test_listeners_hear_every_change():
    stack = UndoStack()
    calls = []
    stack.subscribe(lambda: calls.append(len(stack)))
    stack.push(CreateUndo(event_id="a"))
    stack.pop()
    stack.clear()
    assert calls == [1, 0, 0]


def test_entries_carry_their_kind():
    assert CreateUndo(event_id="a").kind is UndoKind.CREATE
    assert MoveUndo("a", "primary", at(DAY, "09:00"), at(DAY, "10:00")).kind is UndoKind.MOVE


def test_nothing_to_undo():
    sink = FakeSink()
    assert execute_undo(UndoStack(), sink) is False
    assert sink.calls == []


def test_move_undo_issues_a_single_update_and_does_not_re_push():
    event = timed("lecture", "15:05", "16:05")
    sink = FakeSink([event])
    stack = UndoStack()
    stack.push(MoveUndo("lecture", "primary", at(DAY, "14:00"), at(DAY, "15:00")))

    assert execute_undo(stack, sink) is True
    assert len(sink.calls) == 1
    kind, event_id, calendar_id, patch = sink.calls[0]
    assert (kind, event_id, calendar_id) == ("update", "lecture", "primary")
    assert patch == EventPatch(start=at(DAY, "14:00"), end=at(DAY, "15:00"))
    assert not stack.has_entries()


def test_create_undo_deletes_the_created_event():
    sink = FakeSink([timed("new", "09:00", "10:00")])
    stack = UndoStack()
    stack.push(CreateUndo(event_id="new"))
    execute_undo(stack, sink)
    assert sink.calls == [("delete", "new", "primary")]
    assert "new" not in sink.events


def test_delete_undo_reinserts_the_full_payload():
    payload = timed("gone", "09:00", "10:00", description="notes")
    sink = FakeSink()
    stack = UndoStack()
    stack.push(DeleteUndo(payload=payload))
    execute_undo(stack, sink)
    assert sink.calls == [("insert", payload)]


def test_edit_undo_restores_original_fields():
    sink = FakeSink([timed("e", "09:00", "10:00", summary="Renamed")])
    stack = UndoStack()
    stack.push(EditUndo("e", "primary", EventPatch(summary="Original")))
    execute_undo(stack, sink)
    assert sink.events["e"].summary == "Original"


def test_failed_undo_reports_false_and_drops_the_entry():
    stack = UndoStack()
    stack.push(CreateUndo(event_id="new"))
    assert execute_undo(stack, FailingSink()) is False
    assert len(stack) == 0
