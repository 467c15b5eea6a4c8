from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional, Protocol

from ..domain import (
    CreateUndo,
    DeleteUndo,
    EditUndo,
    Event,
    EventPatch,
    MoveUndo,
    UndoEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_UNDO_LIMIT = 10


class EventSink(Protocol):
    def create_event(
        self, summary: str, start: datetime, end: datetime, description: Optional[str] = None
    ) -> Event: ...

    def insert_event(self, payload: Event) -> Event: ...

    def update_event(self, event_id: str, calendar_id: str, patch: EventPatch) -> Event: ...

    def delete_event(self, event_id: str, calendar_id: str) -> None: ...


class EventStore(EventSink, Protocol):
    def list_events(self, range_start: datetime, range_end: datetime) -> List[Event]: ...


class UndoStack:
    """Bounded history of the most recent calendar mutations.

    One instance lives for a view session and is handed to whatever issues
    mutations. Entries are never restored after an undo attempt, successful or not.
    Pushes and pops may come from the store worker as well as the GUI thread.
    """

    def __init__(self, *, limit: int = DEFAULT_UNDO_LIMIT) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self._entries: List[UndoEntry] = []
        self._lock = threading.Lock()
        self._listeners: List[Callable[[], None]] = []

    def push(self, entry: UndoEntry) -> None:
        with self._lock:
            self._entries.append(entry)
            del self._entries[: -self.limit]
            held = len(self._entries)
        logger.debug("Pushed %s undo entry (%d held)", entry.kind.value, held)
        self._notify()

    def pop(self) -> Optional[UndoEntry]:
        with self._lock:
            if not self._entries:
                return None
            entry = self._entries.pop()
        self._notify()
        return entry

    def has_entries(self) -> bool:
        return bool(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        self._notify()

    def entries(self) -> List[UndoEntry]:
        with self._lock:
            return list(self._entries)

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def __len__(self) -> int:
        return len(self._entries)

    def _notify(self) -> None:
        for callback in self._listeners:
            callback()


def invert(entry: UndoEntry, sink: EventSink) -> None:
    """Issue the single remote call that reverses ``entry``."""

    if isinstance(entry, CreateUndo):
        sink.delete_event(entry.event_id, entry.calendar_id)
    elif isinstance(entry, DeleteUndo):
        sink.insert_event(entry.payload)
    elif isinstance(entry, EditUndo):
        sink.update_event(entry.event_id, entry.calendar_id, entry.original)
    elif isinstance(entry, MoveUndo):
        sink.update_event(
            entry.event_id,
            entry.calendar_id,
            EventPatch(start=entry.original_start, end=entry.original_end),
        )
    else:
        raise TypeError(f"Unknown undo entry: {entry!r}")


def execute_undo(stack: UndoStack, sink: EventSink) -> bool:
    entry = stack.pop()
    if entry is None:
        return False
    try:
        invert(entry, sink)
    except Exception:  # noqa: BLE001
        logger.exception("Undo of %s entry failed", entry.kind.value)
        return False
    logger.info("Undid %s entry", entry.kind.value)
    return True
