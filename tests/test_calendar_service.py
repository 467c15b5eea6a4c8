from datetime import timedelta

import pytest

from conftest import DAY, FailingSink, at, timed
from daygrid.core import CreateIntent, MemoryPreferenceStore, RescheduleIntent
from daygrid.domain import AllDayEvent, CreateUndo, DeleteUndo, EditUndo, EventPatch
from daygrid.services import CalendarService, CalendarServiceError, ServiceContext


@pytest.fixture
def service(context):
    return CalendarService(context)


def test_refresh_hydrates_the_cache(service, sink):
    sink.events = {
        "a": timed("a", "09:00", "10:00"),
        "h": AllDayEvent(id="h", summary="Holiday", start=DAY, end=DAY + timedelta(days=2)),
    }
    events = service.refresh(DAY)

    assert len(events) == 2
    _, range_start, range_end = sink.calls[0]
    assert range_end - range_start == timedelta(days=62)
    assert [event.id for event in service.timed_for_day(DAY)] == ["a"]
    assert [event.id for event in service.all_day_for_day(DAY + timedelta(days=1))] == ["h"]
    assert service.all_day_for_day(DAY + timedelta(days=2)) == []


def test_create_pushes_undo_with_the_new_id(service, context):
    result = service.create_from_intent(CreateIntent(at(DAY, "10:00"), at(DAY, "10:15")), "Study")

    assert result.ok
    entry = context.undo.pop()
    assert isinstance(entry, CreateUndo)
    assert entry.event_id == result.event.id


def test_insert_new_pushes_create_undo(service, context, sink):
    event = timed("planned", "12:00", "13:00")
    assert service.insert_new(event).ok
    assert sink.events["planned"] == event
    assert context.undo.pop() == CreateUndo(event_id="planned")


def test_reschedule_updates_without_pushing(service, context, sink):
    event = timed("lecture", "14:00", "15:00")
    sink.events[event.id] = event
    result = service.reschedule(RescheduleIntent(event, at(DAY, "15:05"), at(DAY, "16:05")))

    assert result.ok
    assert sink.events["lecture"].start == at(DAY, "15:05")
    assert len(context.undo) == 0


def test_edit_records_only_changed_fields(service, context, sink):
    event = timed("e", "09:00", "10:00", summary="Old", description="keep")
    sink.events[event.id] = event
    service.edit_event(event, EventPatch(summary="New"))

    entry = context.undo.pop()
    assert isinstance(entry, EditUndo)
    assert entry.original == EventPatch(summary="Old")


def test_empty_edit_is_a_no_op(service, context, sink):
    event = timed("e", "09:00", "10:00")
    result = service.edit_event(event, EventPatch())
    assert result.ok
    assert sink.calls == []
    assert len(context.undo) == 0


def test_delete_then_undo_restores_the_event(service, context, sink):
    event = timed("e", "09:00", "10:00")
    sink.events[event.id] = event
    assert service.delete_event(event).ok
    assert isinstance(context.undo.entries()[-1], DeleteUndo)
    assert "e" not in sink.events

    assert service.undo_last()
    assert sink.events["e"] == event


def test_failures_become_messages(settings):
    context = ServiceContext(settings=settings, preferences=MemoryPreferenceStore(), events=FailingSink())
    service = CalendarService(context)
    result = service.create_event("Study", at(DAY, "10:00"), at(DAY, "11:00"))

    assert not result.ok
    assert "store unavailable" in result.message
    assert len(context.undo) == 0


def test_missing_store_raises(context):
    context.events = None
    with pytest.raises(CalendarServiceError):
        CalendarService(context).refresh(DAY)
