from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import DAY, at, timed
from daygrid.domain import AllDayEvent, ColorRule, EventPatch, TimedEvent, event_from_record


class TestEventFromRecord:
    def test_stored_timed_record(self):
        event = event_from_record(
            {
                "id": "e1",
                "summary": "Lecture",
                "starts_at": "2026-01-22T09:00:00+00:00",
                "ends_at": "2026-01-22T10:00:00+00:00",
                "all_day": False,
            }
        )
        assert isinstance(event, TimedEvent)
        assert event.duration == timedelta(hours=1)
        assert event.calendar_id == "primary"

    def test_provider_shaped_all_day_record(self):
        event = event_from_record(
            {
                "id": "h",
                "summary": "Holiday",
                "start": {"date": "2026-01-22"},
                "end": {"date": "2026-01-23"},
                "calendarId": "holidays",
                "calendarColor": "#16a765",
            }
        )
        assert isinstance(event, AllDayEvent)
        assert event.start == DAY
        assert event.calendar_id == "holidays"
        assert event.calendar_color == "#16a765"

    def test_zulu_suffix_is_accepted(self):
        event = event_from_record(
            {"id": "z", "start": {"dateTime": "2026-01-22T09:00:00Z"}, "end": {"dateTime": "2026-01-22T09:30:00Z"}}
        )
        assert event.start == datetime(2026, 1, 22, 9, tzinfo=timezone.utc)

    def test_mixed_boundaries_are_rejected(self):
        with pytest.raises(ValueError):
            event_from_record({"id": "m", "start": {"dateTime": "2026-01-22T09:00:00Z"}, "end": {"date": "2026-01-23"}})

    def test_missing_start_is_rejected(self):
        with pytest.raises(ValueError):
            event_from_record({"id": "m"})


def test_records_round_trip_through_storage_shape():
    original = timed("e", "09:00", "10:00", description="[type: lab]")
    assert event_from_record(original.to_record()) == original
    holiday = AllDayEvent(id="h", summary="Holiday", start=DAY, end=date(2026, 1, 23))
    assert event_from_record(holiday.to_record()) == holiday


def test_patch_only_serialises_set_fields():
    patch = EventPatch(start=at(DAY, "10:00"), end=at(DAY, "11:00"))
    assert patch.to_record() == {
        "starts_at": "2026-01-22T10:00:00+00:00",
        "ends_at": "2026-01-22T11:00:00+00:00",
        "all_day": False,
    }
    assert EventPatch().is_empty
    assert EventPatch(description="").to_record() == {"description": ""}


def test_color_rule_rejects_non_list_keywords():
    with pytest.raises(ValueError):
        ColorRule.from_record({"id": "1", "name": "x", "keywords": "exam", "color": "#000000"})
    rule = ColorRule.from_record({"id": "1", "name": "Exams", "keywords": ["exam"], "color": "#ef4444"})
    assert ColorRule.from_record(rule.to_record()) == rule
