from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple, Union

from .enums import UndoKind

PRIMARY_CALENDAR = "primary"


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    raise ValueError(f"Unsupported datetime value: {value!r}")


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Unsupported date value: {value!r}")


def _boundary(record: Dict[str, Any], key: str) -> Tuple[Any, bool]:
    """Return ``(raw_value, has_time)`` for ``start``/``end`` in either record shape.

    Flat records carry ``starts_at``/``ends_at`` plus an ``all_day`` flag; provider-style
    records carry ``{"dateTime": ...}`` or ``{"date": ...}`` objects.
    """

    nested = record.get(key)
    if isinstance(nested, dict):
        if nested.get("dateTime"):
            return nested["dateTime"], True
        if nested.get("date"):
            return nested["date"], False
        return None, False
    raw = record.get(f"{key}s_at")
    if raw is None:
        return None, False
    if record.get("all_day"):
        return raw, False
    if isinstance(raw, datetime):
        return raw, True
    if isinstance(raw, date):
        return raw, False
    return raw, "T" in str(raw)


@dataclass(frozen=True, slots=True)
class TimedEvent:
    id: str
    summary: str
    start: datetime
    end: datetime
    description: str = ""
    location: Optional[str] = None
    calendar_id: str = PRIMARY_CALENDAR
    calendar_color: Optional[str] = None

    @property
    def duration(self):
        return self.end - self.start

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.summary,
            "description": self.description,
            "location": self.location,
            "calendar_id": self.calendar_id,
            "calendar_color": self.calendar_color,
            "starts_at": self.start.isoformat(),
            "ends_at": self.end.isoformat(),
            "all_day": False,
        }


@dataclass(frozen=True, slots=True)
class AllDayEvent:
    id: str
    summary: str
    start: date
    end: date
    description: str = ""
    location: Optional[str] = None
    calendar_id: str = PRIMARY_CALENDAR
    calendar_color: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.summary,
            "description": self.description,
            "location": self.location,
            "calendar_id": self.calendar_id,
            "calendar_color": self.calendar_color,
            "starts_at": self.start.isoformat(),
            "ends_at": self.end.isoformat(),
            "all_day": True,
        }


Event = Union[TimedEvent, AllDayEvent]


def event_from_record(record: Dict[str, Any]) -> Event:
    """Build the matching event variant from a stored or provider record."""

    start_raw, start_timed = _boundary(record, "start")
    end_raw, end_timed = _boundary(record, "end")
    if start_raw is None:
        raise ValueError(f"Event record {record.get('id')!r} has no start")
    if start_timed != end_timed or end_raw is None:
        raise ValueError(f"Event record {record.get('id')!r} mixes timed and date-only boundaries")

    common = dict(
        id=str(record["id"]),
        summary=str(record.get("summary") or ""),
        description=record.get("description") or "",
        location=record.get("location"),
        calendar_id=record.get("calendar_id") or record.get("calendarId") or PRIMARY_CALENDAR,
        calendar_color=record.get("calendar_color") or record.get("calendarColor"),
    )
    if start_timed:
        return TimedEvent(start=_parse_datetime(start_raw), end=_parse_datetime(end_raw), **common)
    return AllDayEvent(start=_parse_date(start_raw), end=_parse_date(end_raw), **common)


@dataclass(frozen=True, slots=True)
class ColumnLayout:
    column: int
    total_columns: int


@dataclass(slots=True)
class ColorRule:
    id: str
    name: str
    keywords: list[str] = field(default_factory=list)
    color: str = "#3b82f6"

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ColorRule":
        keywords = record.get("keywords") or []
        if not isinstance(keywords, list):
            raise ValueError("Color rule keywords must be a list")
        return cls(
            id=str(record["id"]),
            name=str(record.get("name") or ""),
            keywords=[str(keyword) for keyword in keywords],
            color=str(record["color"]),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "keywords": list(self.keywords),
            "color": self.color,
        }


@dataclass(frozen=True, slots=True)
class EventPatch:
    """Partial update; ``None`` fields are left untouched remotely."""

    summary: Optional[str] = None
    description: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def to_record(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.summary is not None:
            payload["summary"] = self.summary
        if self.description is not None:
            payload["description"] = self.description
        if self.start is not None:
            payload["starts_at"] = self.start.isoformat()
            payload["all_day"] = False
        if self.end is not None:
            payload["ends_at"] = self.end.isoformat()
        return payload

    @property
    def is_empty(self) -> bool:
        return not self.to_record()


# ---------------------------------------------------------------------- undo entries


@dataclass(frozen=True, slots=True)
class CreateUndo:
    event_id: str
    calendar_id: str = PRIMARY_CALENDAR
    kind: UndoKind = field(default=UndoKind.CREATE, init=False)


@dataclass(frozen=True, slots=True)
class DeleteUndo:
    payload: Event
    kind: UndoKind = field(default=UndoKind.DELETE, init=False)


@dataclass(frozen=True, slots=True)
class EditUndo:
    event_id: str
    calendar_id: str
    original: EventPatch
    kind: UndoKind = field(default=UndoKind.EDIT, init=False)


@dataclass(frozen=True, slots=True)
class MoveUndo:
    event_id: str
    calendar_id: str
    original_start: datetime
    original_end: datetime
    kind: UndoKind = field(default=UndoKind.MOVE, init=False)


UndoEntry = Union[CreateUndo, DeleteUndo, EditUndo, MoveUndo]
