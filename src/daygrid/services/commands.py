from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Dict, List, Optional, Sequence, Tuple

from ..domain import CommandType, Event, EventPatch, TimedEvent
from ..llm import CommandImage, CommandPlan, CommandPlanner, PlannedEvent
from .calendar import CalendarService, MutationResult

logger = logging.getLogger(__name__)

HISTORY_MESSAGES = 6


@dataclass(slots=True)
class PendingCommand:
    """A reviewed plan waiting for the user's yes/no."""

    kind: CommandType
    message: str
    creates: List[Event] = field(default_factory=list)
    deletes: List[Event] = field(default_factory=list)
    update: Optional[Tuple[Event, EventPatch]] = None

    @property
    def needs_confirmation(self) -> bool:
        return bool(self.creates or self.deletes or self.update)


@dataclass(slots=True)
class CreateReview:
    pending: List[Event]
    duplicates: List[str]
    conflicts: List[Tuple[str, str]]


def _describe(event: Event) -> str:
    if isinstance(event, TimedEvent):
        return f"• {event.summary} - {event.start.strftime('%a %b %d, %I:%M %p')}"
    return f"• {event.summary} - {event.start.strftime('%a %b %d')} (all day)"


def review_creates(planned: Sequence[PlannedEvent], existing: Sequence[Event], tz: tzinfo) -> CreateReview:
    """Drop repeats within the request and exact copies of existing events; collect overlaps."""

    seen: set[Tuple[str, Optional[str]]] = set()
    candidates: List[Event] = []
    for item in planned:
        key = (item.summary, item.start.key())
        if key in seen:
            continue
        seen.add(key)
        try:
            candidates.append(item.to_event(tz))
        except ValueError as exc:
            logger.warning("Skipping planned event: %s", exc)

    duplicates: List[str] = []
    pending: List[Event] = []
    for candidate in candidates:
        is_duplicate = any(
            existing.summary.lower() == candidate.summary.lower()
            and type(existing) is type(candidate)
            and existing.start == candidate.start
            for existing in existing
        )
        if is_duplicate:
            duplicates.append(candidate.summary)
        else:
            pending.append(candidate)

    conflicts: List[Tuple[str, str]] = []
    for candidate in pending:
        if not isinstance(candidate, TimedEvent):
            continue
        for other in existing:
            if isinstance(other, TimedEvent) and candidate.start < other.end and other.start < candidate.end:
                conflicts.append((candidate.summary, other.summary))
    return CreateReview(pending=pending, duplicates=duplicates, conflicts=conflicts)


def create_message(review: CreateReview) -> str:
    if not review.pending and review.duplicates:
        return (
            f"These events already exist on your calendar: {', '.join(review.duplicates)}. "
            "No new events were created."
        )
    lines = "\n".join(_describe(event) for event in review.pending)
    message = f"Add {len(review.pending)} event(s) to your calendar?\n\n{lines}"
    if review.conflicts:
        clashes = "\n".join(f"\"{new}\" conflicts with \"{old}\"" for new, old in review.conflicts)
        message += f"\n\nScheduling conflicts:\n{clashes}"
    if review.duplicates:
        message += f"\n\n(Skipping {len(review.duplicates)} duplicate(s): {', '.join(review.duplicates)})"
    return message


@dataclass(slots=True)
class CommandService:
    calendar: CalendarService
    planner: CommandPlanner
    history: List[Dict[str, str]] = field(default_factory=list)

    @property
    def tz(self) -> tzinfo:
        return self.planner.tz

    def submit(
        self, text: str, *, today: Optional[date] = None, image: Optional[CommandImage] = None
    ) -> PendingCommand:
        existing = self.calendar.all_events()
        plan = self.planner.plan(text, existing, list(self.history), today=today, image=image)
        pending = self.review(plan, existing)
        # history stays text-only
        self.remember(f"[image] {text}".strip() if image is not None else text, pending.message)
        return pending

    def review(self, plan: CommandPlan, existing: Sequence[Event]) -> PendingCommand:
        if plan.type is CommandType.QUESTION:
            return PendingCommand(kind=plan.type, message=plan.answer or plan.message or "")

        if plan.type is CommandType.CREATE:
            review = review_creates(plan.events, existing, self.tz)
            if not review.pending:
                return PendingCommand(kind=CommandType.QUESTION, message=create_message(review))
            return PendingCommand(kind=plan.type, message=create_message(review), creates=review.pending)

        by_id = {event.id: event for event in existing}
        if plan.type is CommandType.DELETE:
            found = [by_id[ref.id] for ref in plan.events_to_delete if ref.id in by_id]
            if not found:
                return PendingCommand(kind=CommandType.QUESTION, message="I couldn't find those events to delete.")
            listing = "\n".join(_describe(event) for event in found)
            message = plan.message or f"Delete {len(found)} event(s)?"
            return PendingCommand(kind=plan.type, message=f"{message}\n\n{listing}", deletes=found)

        update = plan.event_to_update
        target = by_id.get(update.id) if update else None
        if update is None or target is None:
            return PendingCommand(kind=CommandType.QUESTION, message="I couldn't find the event to update.")
        patch = update.to_patch(self.tz)
        return PendingCommand(
            kind=plan.type,
            message=plan.message or f"Update \"{target.summary}\"?",
            update=(target, patch),
        )

    def confirm(self, pending: PendingCommand) -> List[MutationResult]:
        results: List[MutationResult] = []
        for event in pending.creates:
            results.append(self.calendar.insert_new(event))
        for event in pending.deletes:
            results.append(self.calendar.delete_event(event))
        if pending.update is not None:
            target, patch = pending.update
            results.append(self.calendar.edit_event(target, patch))
        succeeded = sum(1 for result in results if result.ok)
        self.remember("Yes, go ahead", f"Applied {succeeded} of {len(results)} change(s).")
        return results

    def cancel(self, pending: PendingCommand) -> str:
        message = "Cancelled. Nothing was changed."
        self.remember("No, cancel", message)
        return message

    def remember(self, user_message: str, assistant_message: str) -> None:
        self.history.append({"role": "user", "content": user_message})
        self.history.append({"role": "assistant", "content": assistant_message})
        del self.history[:-HISTORY_MESSAGES]
