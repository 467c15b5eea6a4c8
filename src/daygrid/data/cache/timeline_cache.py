from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional

from ...domain import AllDayEvent, Event, TimedEvent


def _date_range(start: date, end: date) -> Iterable[date]:
    delta = (end - start).days
    for index in range(delta + 1):
        yield start + timedelta(days=index)


@dataclass
class TimelineCache:
    """In-memory snapshot of the last fetched calendar window.

    Timed events are indexed by the local day they start on; all-day events by
    every day they cover (their end date is exclusive).
    """

    tz: Optional[tzinfo] = None
    events_by_id: Dict[str, Event] = field(default_factory=dict)
    days_index: Dict[date, List[str]] = field(default_factory=dict)
    window_start: Optional[date] = None
    window_end: Optional[date] = None

    def hydrate(self, events: Iterable[Event], *, window_start: date, window_end: date) -> None:
        self.clear()
        self.window_start = window_start
        self.window_end = window_end
        for event in events:
            self._index_event(self._localize(event))

    def _localize(self, event: Event) -> Event:
        if isinstance(event, TimedEvent) and self.tz is not None and event.start.tzinfo is not None:
            return TimedEvent(
                id=event.id,
                summary=event.summary,
                start=event.start.astimezone(self.tz),
                end=event.end.astimezone(self.tz),
                description=event.description,
                location=event.location,
                calendar_id=event.calendar_id,
                calendar_color=event.calendar_color,
            )
        return event

    def _index_event(self, event: Event) -> None:
        self.events_by_id[event.id] = event
        if isinstance(event, AllDayEvent):
            last = max(event.start, event.end - timedelta(days=1))
            days: Iterable[date] = _date_range(event.start, last)
        else:
            days = (event.start.date(),)
        for day in days:
            self.days_index.setdefault(day, []).append(event.id)

    def replace(self, event: Event) -> None:
        """Swap in a locally changed event ahead of the next fetch."""

        self.events_by_id[event.id] = self._localize(event)
        self.days_index.clear()
        for current in list(self.events_by_id.values()):
            self._index_event(current)

    def covers(self, start: date, end: date) -> bool:
        if self.window_start is None or self.window_end is None:
            return False
        return self.window_start <= start and end <= self.window_end

    def events_for_day(self, target_day: date) -> List[Event]:
        identifiers = self.days_index.get(target_day, [])
        return [self.events_by_id[event_id] for event_id in identifiers]

    def timed_for_day(self, target_day: date) -> List[TimedEvent]:
        return [event for event in self.events_for_day(target_day) if isinstance(event, TimedEvent)]

    def all_day_for_day(self, target_day: date) -> List[AllDayEvent]:
        return [event for event in self.events_for_day(target_day) if isinstance(event, AllDayEvent)]

    def all_events(self) -> List[Event]:
        return list(self.events_by_id.values())

    def clear(self) -> None:
        self.events_by_id.clear()
        self.days_index.clear()
