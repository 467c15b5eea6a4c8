from datetime import timedelta

from conftest import DAY, at, timed
from daygrid.core import MemoryPreferenceStore
from daygrid.domain import AllDayEvent
from daygrid.services import AgendaService


def test_upcoming_matches_tags_and_titles_in_order():
    now = at(DAY, "08:00")
    events = [
        timed("exam", "09:00", "10:00", day=DAY + timedelta(days=3), summary="Chem midterm", description="[TYPE: exam]"),
        timed("hw", "23:00", "23:30", summary="Physics homework due"),
        timed("lunch", "12:00", "13:00", summary="Lunch"),
        timed("past", "07:00", "07:30", summary="Quiz 1"),
        timed("far", "09:00", "10:00", day=DAY + timedelta(days=20), summary="Final exam"),
    ]
    items = AgendaService(MemoryPreferenceStore()).upcoming(events, now)

    assert [item.event.id for item in items] == ["hw", "exam"]
    assert [item.item_type for item in items] == ["homework", "exam"]


def test_disabled_types_are_hidden():
    agenda = AgendaService(MemoryPreferenceStore())
    agenda.toggle_type("lab")
    events = [timed("lab", "10:00", "11:00", summary="Bio lab")]
    assert agenda.upcoming(events, at(DAY, "08:00")) == []


def test_done_marks_are_reported():
    agenda = AgendaService(MemoryPreferenceStore())
    agenda.toggle_done("hw")
    items = agenda.upcoming([timed("hw", "10:00", "11:00", summary="Homework 3")], at(DAY, "08:00"))
    assert items[0].done is True


def test_all_day_deadlines_are_included():
    project = AllDayEvent(id="p", summary="Project report", start=DAY + timedelta(days=1), end=DAY + timedelta(days=2))
    items = AgendaService(MemoryPreferenceStore()).upcoming([project], at(DAY, "08:00"))
    assert items[0].item_type == "project"


def test_custom_tasks_join_the_agenda_in_time_order():
    agenda = AgendaService(MemoryPreferenceStore())
    task = agenda.add_task("  Read chapter 4 ", at(DAY, "11:00"), "homework")
    events = [timed("hw", "10:00", "10:30", summary="Physics homework"), timed("exam", "12:00", "13:00", summary="Exam")]

    items = agenda.upcoming(events, at(DAY, "08:00"))

    assert task is not None and task.summary == "Read chapter 4"
    assert [item.item_id for item in items] == ["hw", task.id, "exam"]
    assert items[1].is_task and items[1].has_time


def test_custom_tasks_follow_the_type_filter_and_horizon():
    agenda = AgendaService(MemoryPreferenceStore())
    agenda.add_task("Lab write-up", at(DAY, "11:00"), "lab")
    agenda.add_task("Far away", at(DAY + timedelta(days=20), "11:00"), "homework")
    agenda.toggle_type("lab")
    assert agenda.upcoming([], at(DAY, "08:00")) == []


def test_blank_task_is_not_stored():
    agenda = AgendaService(MemoryPreferenceStore())
    assert agenda.add_task("   ", at(DAY, "11:00"), "homework") is None
    assert agenda.custom_tasks() == []


def test_deleting_a_task_clears_its_done_mark():
    agenda = AgendaService(MemoryPreferenceStore())
    task = agenda.add_task("Essay", at(DAY, "11:00"), "assignment")
    agenda.toggle_done(task.id)

    assert agenda.delete_task(task.id) is True
    assert agenda.custom_tasks() == []
    assert task.id not in agenda.done_items()
    assert agenda.delete_task(task.id) is False


def test_malformed_task_records_are_skipped():
    store = MemoryPreferenceStore(
        {"daygrid_custom_tasks": '["junk", {"id": "t1"}, {"id": "t2", "summary": "Ok", "dueDate": "2026-01-22T11:00:00+00:00"}]'}
    )
    tasks = AgendaService(store).custom_tasks()
    assert [task.id for task in tasks] == ["t2"]
    assert tasks[0].item_type == "homework"


def test_custom_types_can_be_added_and_removed():
    agenda = AgendaService(MemoryPreferenceStore())
    agenda.add_type(" Reading ")
    assert agenda.custom_types() == ["reading"]
    agenda.remove_type("reading")
    assert agenda.custom_types() == []
