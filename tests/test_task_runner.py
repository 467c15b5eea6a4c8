import threading
import time

import pytest

from conftest import DAY, FakeSink, at, timed
from daygrid.core import MemoryPreferenceStore, RescheduleIntent, UndoStack
from daygrid.domain import CreateUndo, MoveUndo
from daygrid.services import CalendarService, ServiceContext

pytest.importorskip("PyQt6.QtCore")

from daygrid.utils.qt import TaskRunner  # noqa: E402


class SlowSink(FakeSink):
    def delete_event(self, event_id, calendar_id):
        time.sleep(0.2)
        super().delete_event(event_id, calendar_id)

    def update_event(self, event_id, calendar_id, patch):
        time.sleep(0.1)
        return super().update_event(event_id, calendar_id, patch)


@pytest.fixture
def slow_calendar(settings):
    sink = SlowSink([timed("lecture", "14:00", "15:00")])
    context = ServiceContext(settings=settings, preferences=MemoryPreferenceStore(), events=sink)
    return CalendarService(context), sink


def test_undo_waits_for_the_delete_it_reverts(slow_calendar):
    calendar, sink = slow_calendar
    event = sink.events["lecture"]
    runner = TaskRunner()

    runner.submit(calendar.delete_event, event)
    runner.submit(calendar.undo_last)

    assert runner.wait(5000)
    assert [call[0] for call in sink.calls] == ["delete", "insert"]
    assert sink.events["lecture"] == event
    assert not calendar.context.undo.has_entries()


def test_undo_of_a_move_lands_after_the_move(slow_calendar):
    calendar, sink = slow_calendar
    event = sink.events["lecture"]
    runner = TaskRunner()
    calendar.context.undo.push(MoveUndo(event.id, event.calendar_id, event.start, event.end))

    runner.submit(calendar.reschedule, RescheduleIntent(event, at(DAY, "16:00"), at(DAY, "17:00")))
    runner.submit(calendar.undo_last)

    assert runner.wait(5000)
    assert [call[0] for call in sink.calls] == ["update", "update"]
    assert sink.events["lecture"].start == at(DAY, "14:00")


def test_stack_survives_pushes_from_several_threads():
    stack = UndoStack(limit=1000)

    def push_many(prefix):
        for index in range(200):
            stack.push(CreateUndo(event_id=f"{prefix}{index}"))

    threads = [threading.Thread(target=push_many, args=(name,)) for name in "abcd"]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(stack) == 800
    assert len({entry.event_id for entry in stack.entries()}) == 800
