from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from ..domain import PRIMARY_CALENDAR, AllDayEvent, CommandType, Event, EventPatch, TimedEvent


def _aware(value: datetime, tz: tzinfo) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=tz)


class EventTime(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_time: Optional[str] = Field(default=None, alias="dateTime")
    day: Optional[str] = Field(default=None, alias="date")

    @property
    def is_timed(self) -> bool:
        return bool(self.date_time)

    def as_datetime(self, tz: tzinfo) -> Optional[datetime]:
        if not self.date_time:
            return None
        return _aware(datetime.fromisoformat(self.date_time.replace("Z", "+00:00")), tz)

    def as_date(self) -> Optional[date]:
        if self.day:
            return date.fromisoformat(self.day[:10])
        return None

    def key(self) -> Optional[str]:
        return self.date_time or self.day


class PlannedEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    start: EventTime
    end: EventTime
    description: Optional[str] = Field(default=None)

    def to_event(self, tz: tzinfo) -> Event:
        identifier = str(uuid4())
        if self.start.is_timed and self.end.is_timed:
            return TimedEvent(
                id=identifier,
                summary=self.summary,
                start=self.start.as_datetime(tz),
                end=self.end.as_datetime(tz),
                description=self.description or "",
            )
        start_day = self.start.as_date()
        end_day = self.end.as_date()
        if start_day is None or end_day is None:
            raise ValueError(f"Planned event {self.summary!r} mixes timed and date-only boundaries")
        return AllDayEvent(
            id=identifier,
            summary=self.summary,
            start=start_day,
            end=end_day,
            description=self.description or "",
        )


class EventReference(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    calendar_id: str = Field(default=PRIMARY_CALENDAR, alias="calendarId")
    summary: str = Field(default="")


class EventUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    calendar_id: str = Field(default=PRIMARY_CALENDAR, alias="calendarId")
    summary: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    start: Optional[EventTime] = Field(default=None)
    end: Optional[EventTime] = Field(default=None)

    def to_patch(self, tz: tzinfo) -> EventPatch:
        return EventPatch(
            summary=self.summary,
            description=self.description,
            start=self.start.as_datetime(tz) if self.start else None,
            end=self.end.as_datetime(tz) if self.end else None,
        )


class CommandPlan(BaseModel):
    """Structured reply of the language model for one user command."""

    model_config = ConfigDict(populate_by_name=True)

    type: CommandType
    answer: Optional[str] = Field(default=None)
    message: Optional[str] = Field(default=None)
    events: List[PlannedEvent] = Field(default_factory=list)
    events_to_delete: List[EventReference] = Field(default_factory=list, alias="eventsToDelete")
    event_to_update: Optional[EventUpdate] = Field(default=None, alias="eventToUpdate")
