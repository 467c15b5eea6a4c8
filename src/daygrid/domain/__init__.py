"""Domain models for the calendar grid."""

from __future__ import annotations

from .enums import CommandType, GestureMode, UndoKind, ViewMode
from .models import (
    PRIMARY_CALENDAR,
    AllDayEvent,
    ColorRule,
    ColumnLayout,
    CreateUndo,
    DeleteUndo,
    EditUndo,
    Event,
    EventPatch,
    MoveUndo,
    TimedEvent,
    UndoEntry,
    event_from_record,
)

__all__ = [
    "PRIMARY_CALENDAR",
    "AllDayEvent",
    "ColorRule",
    "ColumnLayout",
    "CommandType",
    "CreateUndo",
    "DeleteUndo",
    "EditUndo",
    "Event",
    "EventPatch",
    "GestureMode",
    "MoveUndo",
    "TimedEvent",
    "UndoEntry",
    "UndoKind",
    "ViewMode",
    "event_from_record",
]
