"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from daygrid.config import AppSettings, GridSettings, LlmSettings, StorageSettings, SupabaseSettings, UiSettings
from daygrid.core import MemoryPreferenceStore
from daygrid.domain import Event, EventPatch, TimedEvent
from daygrid.services import ServiceContext

DAY = date(2026, 1, 22)


def at(day: date, hhmm: str, tz=timezone.utc) -> datetime:
    hours, minutes = (int(part) for part in hhmm.split(":"))
    return datetime(day.year, day.month, day.day, tzinfo=tz) + timedelta(hours=hours, minutes=minutes)


def timed(
    event_id: str,
    start: str,
    end: str,
    *,
    day: date = DAY,
    summary: Optional[str] = None,
    description: str = "",
) -> TimedEvent:
    return TimedEvent(
        id=event_id,
        summary=summary or event_id,
        start=at(day, start),
        end=at(day, end),
        description=description,
    )


class FakeSink:
    """In-memory event store that records every call."""

    def __init__(self, events: Optional[List[Event]] = None) -> None:
        self.events: Dict[str, Event] = {event.id: event for event in events or []}
        self.calls: List[tuple] = []
        self._next_id = 1

    def list_events(self, range_start: datetime, range_end: datetime) -> List[Event]:
        self.calls.append(("list", range_start, range_end))
        return list(self.events.values())

    def create_event(self, summary, start, end, description=None) -> Event:
        self.calls.append(("create", summary, start, end, description))
        event = TimedEvent(id=f"new-{self._next_id}", summary=summary, start=start, end=end, description=description or "")
        self._next_id += 1
        self.events[event.id] = event
        return event

    def insert_event(self, payload: Event) -> Event:
        self.calls.append(("insert", payload))
        self.events[payload.id] = payload
        return payload

    def update_event(self, event_id: str, calendar_id: str, patch: EventPatch) -> Event:
        self.calls.append(("update", event_id, calendar_id, patch))
        current = self.events[event_id]
        changes = {
            name: value
            for name, value in (
                ("summary", patch.summary),
                ("description", patch.description),
                ("start", patch.start),
                ("end", patch.end),
            )
            if value is not None
        }
        fields = {slot: getattr(current, slot) for slot in current.__slots__}
        fields.update(changes)
        updated = type(current)(**fields)
        self.events[event_id] = updated
        return updated

    def delete_event(self, event_id: str, calendar_id: str) -> None:
        self.calls.append(("delete", event_id, calendar_id))
        self.events.pop(event_id, None)


class FailingSink(FakeSink):
    def _fail(self, *args, **kwargs):
        raise RuntimeError("store unavailable")

    create_event = _fail
    insert_event = _fail
    update_event = _fail
    delete_event = _fail


@pytest.fixture
def day() -> date:
    return DAY


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        llm=LlmSettings(api_key=None, model="gpt-4o-mini", base_url=None, organization=None),
        supabase=SupabaseSettings(url=None, anon_key=None),
        ui=UiSettings(
            app_name="Daygrid",
            organization="Daygrid",
            timezone_offset="+00:00",
            week_hour_height=48,
            day_hour_height=60,
        ),
        grid=GridSettings(
            create_snap_minutes=15,
            reschedule_snap_minutes=5,
            min_create_minutes=15,
            undo_limit=10,
            week_min_visual_minutes=20,
            day_min_visual_minutes=30,
        ),
        storage=StorageSettings(events_table="calendar_events", fetch_window_days=62),
    )


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def context(settings, sink) -> ServiceContext:
    return ServiceContext(settings=settings, preferences=MemoryPreferenceStore(), events=sink)
