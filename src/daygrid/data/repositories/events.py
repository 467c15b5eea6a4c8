from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from ...domain import PRIMARY_CALENDAR, Event, EventPatch, TimedEvent, event_from_record
from ..supabase import SupabaseGateway

logger = logging.getLogger(__name__)


class EventNotFoundError(RuntimeError):
    """Raised when a mutation targets an event the store no longer has."""


@dataclass(slots=True)
class EventRepository:
    """Remote calendar store: the event source and sink used by the services."""

    gateway: SupabaseGateway
    table_name: str

    def list_events(self, range_start: datetime, range_end: datetime) -> List[Event]:
        response = (
            self.gateway.table(self.table_name)
            .select("*")
            .lt("starts_at", range_end.isoformat())
            .gt("ends_at", range_start.isoformat())
            .order("starts_at", desc=False)
            .execute()
        )
        events: list[Event] = []
        for record in response.data or []:
            try:
                events.append(event_from_record(record))
            except (KeyError, ValueError) as exc:
                logger.warning("Skipping malformed event record %s: %s", record.get("id"), exc)
        return events

    def create_event(
        self,
        summary: str,
        start: datetime,
        end: datetime,
        description: Optional[str] = None,
        *,
        calendar_id: str = PRIMARY_CALENDAR,
    ) -> Event:
        event = TimedEvent(
            id=str(uuid4()),
            summary=summary,
            start=start,
            end=end,
            description=description or "",
            calendar_id=calendar_id,
        )
        return self.insert_event(event)

    def insert_event(self, payload: Event) -> Event:
        record = payload.to_record()
        response = self.gateway.table(self.table_name).upsert(record, on_conflict="id").execute()
        rows = response.data or [record]
        return event_from_record(rows[0])

    def update_event(self, event_id: str, calendar_id: str, patch: EventPatch) -> Event:
        response = (
            self.gateway.table(self.table_name)
            .update(patch.to_record())
            .eq("id", event_id)
            .eq("calendar_id", calendar_id)
            .execute()
        )
        rows = response.data or []
        if not rows:
            raise EventNotFoundError(f"Event {event_id} not found in calendar {calendar_id}")
        return event_from_record(rows[0])

    def delete_event(self, event_id: str, calendar_id: str) -> None:
        response = (
            self.gateway.table(self.table_name)
            .delete()
            .eq("id", event_id)
            .eq("calendar_id", calendar_id)
            .execute()
        )
        if not response.data:
            raise EventNotFoundError(f"Event {event_id} not found in calendar {calendar_id}")
