from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from ..core import CreateIntent, RescheduleIntent, execute_undo
from ..core.undo import EventStore
from ..domain import (
    AllDayEvent,
    CreateUndo,
    DeleteUndo,
    EditUndo,
    Event,
    EventPatch,
    TimedEvent,
)
from .context import ServiceContext

logger = logging.getLogger(__name__)


class CalendarServiceError(RuntimeError):
    """Raised when the service has no usable event store."""


@dataclass(frozen=True, slots=True)
class MutationResult:
    ok: bool
    message: str
    event: Optional[Event] = None


@dataclass(slots=True)
class CalendarService:
    """Issues remote mutations for gestures and commands and keeps the undo history.

    Remote failures never propagate: each mutation returns a ``MutationResult``
    whose message is meant for a one-line status display. Local state is not
    rolled back; the next refresh shows what the store actually holds.
    """

    context: ServiceContext

    @property
    def sink(self) -> EventStore:
        if self.context.events is None:
            raise CalendarServiceError("No event store is configured.")
        return self.context.events

    # ------------------------------------------------------------------ reads

    def refresh(self, anchor: date) -> List[Event]:
        tz = self.context.settings.ui.tz
        half_window = timedelta(days=self.context.settings.storage.fetch_window_days // 2)
        window_start = anchor - half_window
        window_end = anchor + half_window
        events = self.sink.list_events(
            datetime.combine(window_start, time(), tzinfo=tz),
            datetime.combine(window_end, time(), tzinfo=tz),
        )
        self.context.cache.hydrate(events, window_start=window_start, window_end=window_end)
        logger.info("Fetched %d events around %s", len(events), anchor)
        return events

    def timed_for_day(self, day: date) -> List[TimedEvent]:
        return self.context.cache.timed_for_day(day)

    def all_day_for_day(self, day: date) -> List[AllDayEvent]:
        return self.context.cache.all_day_for_day(day)

    def events_for_day(self, day: date) -> List[Event]:
        return self.context.cache.events_for_day(day)

    def all_events(self) -> List[Event]:
        return self.context.cache.all_events()

    # ------------------------------------------------------------------ mutations

    def create_from_intent(self, intent: CreateIntent, summary: str, description: str = "") -> MutationResult:
        return self.create_event(summary, intent.start, intent.end, description)

    def create_event(
        self, summary: str, start: datetime, end: datetime, description: Optional[str] = None
    ) -> MutationResult:
        try:
            created = self.sink.create_event(summary, start, end, description or None)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Creating event %r failed", summary)
            return MutationResult(ok=False, message=f"Failed to create event: {exc}")
        # the id only exists once the store has answered
        self.context.undo.push(CreateUndo(event_id=created.id, calendar_id=created.calendar_id))
        return MutationResult(ok=True, message=f"Created \"{created.summary}\".", event=created)

    def insert_new(self, event: Event) -> MutationResult:
        try:
            stored = self.sink.insert_event(event)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Inserting event %r failed", event.summary)
            return MutationResult(ok=False, message=f"Failed to create event: {exc}")
        self.context.undo.push(CreateUndo(event_id=stored.id, calendar_id=stored.calendar_id))
        return MutationResult(ok=True, message=f"Created \"{stored.summary}\".", event=stored)

    def reschedule(self, intent: RescheduleIntent) -> MutationResult:
        event = intent.event
        patch = EventPatch(start=intent.new_start, end=intent.new_end)
        try:
            updated = self.sink.update_event(event.id, event.calendar_id, patch)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Rescheduling event %s failed", event.id)
            return MutationResult(ok=False, message=f"Failed to move event: {exc}")
        return MutationResult(ok=True, message=f"Moved \"{event.summary}\".", event=updated)

    def edit_event(self, event: Event, patch: EventPatch) -> MutationResult:
        if patch.is_empty:
            return MutationResult(ok=True, message="Nothing to change.", event=event)
        original = EventPatch(
            summary=event.summary if patch.summary is not None else None,
            description=event.description if patch.description is not None else None,
            start=event.start if patch.start is not None and isinstance(event, TimedEvent) else None,
            end=event.end if patch.end is not None and isinstance(event, TimedEvent) else None,
        )
        self.context.undo.push(EditUndo(event_id=event.id, calendar_id=event.calendar_id, original=original))
        try:
            updated = self.sink.update_event(event.id, event.calendar_id, patch)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Editing event %s failed", event.id)
            return MutationResult(ok=False, message=f"Failed to update event: {exc}")
        return MutationResult(ok=True, message=f"Updated \"{updated.summary}\".", event=updated)

    def delete_event(self, event: Event) -> MutationResult:
        self.context.undo.push(DeleteUndo(payload=event))
        try:
            self.sink.delete_event(event.id, event.calendar_id)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Deleting event %s failed", event.id)
            return MutationResult(ok=False, message=f"Failed to delete event: {exc}")
        return MutationResult(ok=True, message=f"Deleted \"{event.summary}\".")

    def undo_last(self) -> bool:
        return execute_undo(self.context.undo, self.sink)
