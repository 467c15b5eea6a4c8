"""Pointer gesture state machines for the calendar grid.

Both controllers are plain objects fed with day + raw minute offsets by the view;
they know nothing about widgets, so they can be driven directly from tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Tuple, Union

from ..domain import GestureMode, MoveUndo, TimedEvent
from .time_math import at_minutes, snap
from .undo import UndoStack

logger = logging.getLogger(__name__)

CREATE_SNAP_MINUTES = 15
RESCHEDULE_SNAP_MINUTES = 5
MIN_CREATE_MINUTES = 15


@dataclass(frozen=True, slots=True)
class CreateIntent:
    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class RescheduleIntent:
    event: TimedEvent
    new_start: datetime
    new_end: datetime


@dataclass(frozen=True, slots=True)
class Idle:
    pass


IDLE = Idle()


# ---------------------------------------------------------------------- drag to create


@dataclass(frozen=True, slots=True)
class Pressed:
    day: date
    anchor_minutes: int
    live_minutes: int

    @property
    def span(self) -> Tuple[int, int]:
        return min(self.anchor_minutes, self.live_minutes), max(self.anchor_minutes, self.live_minutes)


SelectionState = Union[Idle, Pressed]


class DragSelectionController:
    def __init__(
        self,
        *,
        granularity: int = CREATE_SNAP_MINUTES,
        min_minutes: int = MIN_CREATE_MINUTES,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.granularity = granularity
        self.min_minutes = min_minutes
        self.tz = tz
        self.state: SelectionState = IDLE

    @property
    def is_active(self) -> bool:
        return isinstance(self.state, Pressed)

    def press(self, day: date, raw_minutes: float) -> None:
        minutes = snap(raw_minutes, self.granularity)
        self.state = Pressed(day=day, anchor_minutes=minutes, live_minutes=minutes)

    def move(self, raw_minutes: float) -> Optional[Tuple[int, int]]:
        if not isinstance(self.state, Pressed):
            return None
        self.state = Pressed(
            day=self.state.day,
            anchor_minutes=self.state.anchor_minutes,
            live_minutes=snap(raw_minutes, self.granularity),
        )
        return self.state.span

    def preview(self) -> Optional[Tuple[date, int, int]]:
        if not isinstance(self.state, Pressed):
            return None
        start, end = self.state.span
        return self.state.day, start, end

    def release(self) -> Optional[CreateIntent]:
        state, self.state = self.state, IDLE
        if not isinstance(state, Pressed):
            return None
        start, end = state.span
        if end - start < self.min_minutes:
            return None
        intent = CreateIntent(
            start=at_minutes(state.day, start, self.tz),
            end=at_minutes(state.day, end, self.tz),
        )
        logger.debug("Drag selection produced %s - %s", intent.start, intent.end)
        return intent

    def leave(self) -> Optional[CreateIntent]:
        # a pointer that exits the grid finishes the gesture with its last position
        return self.release()


# ---------------------------------------------------------------------- drag to reschedule


@dataclass(frozen=True, slots=True)
class DropTarget:
    day: date
    minutes: int


@dataclass(frozen=True, slots=True)
class Dragging:
    event: TimedEvent
    original_start: datetime
    original_end: datetime
    duration: timedelta
    grab_minutes: float = 0
    target: Optional[DropTarget] = None


RescheduleState = Union[Idle, Dragging]


class DragRescheduleController:
    """Moves one timed event with its duration fixed.

    ``grab_minutes`` is how far below the event's start the pointer grabbed it;
    drop targets keep that offset so the block does not jump under the pointer.
    """

    def __init__(self, *, undo_stack: UndoStack, granularity: int = RESCHEDULE_SNAP_MINUTES) -> None:
        self.undo_stack = undo_stack
        self.granularity = granularity
        self.state: RescheduleState = IDLE

    @property
    def is_active(self) -> bool:
        return isinstance(self.state, Dragging)

    @property
    def dragged_event_id(self) -> Optional[str]:
        return self.state.event.id if isinstance(self.state, Dragging) else None

    def start(self, event: object, *, grab_minutes: float = 0) -> bool:
        if not isinstance(event, TimedEvent) or event.end <= event.start:
            self.state = IDLE
            return False
        self.state = Dragging(
            event=event,
            original_start=event.start,
            original_end=event.end,
            duration=event.end - event.start,
            grab_minutes=grab_minutes,
        )
        return True

    def drag_over(self, day: date, raw_minutes: float) -> Optional[DropTarget]:
        if not isinstance(self.state, Dragging):
            return None
        target = DropTarget(day=day, minutes=snap(raw_minutes - self.state.grab_minutes, self.granularity))
        self.state = replace(self.state, target=target)
        return target

    def leave_grid(self) -> None:
        if isinstance(self.state, Dragging) and self.state.target is not None:
            self.state = replace(self.state, target=None)

    def preview(self) -> Optional[Tuple[date, int, int]]:
        if not isinstance(self.state, Dragging) or self.state.target is None:
            return None
        target = self.state.target
        return target.day, target.minutes, target.minutes + int(self.state.duration.total_seconds() // 60)

    def drop(self) -> Optional[RescheduleIntent]:
        state, self.state = self.state, IDLE
        if not isinstance(state, Dragging) or state.target is None:
            return None
        new_start = at_minutes(state.target.day, state.target.minutes, state.original_start.tzinfo)
        if new_start == state.original_start:
            return None
        new_end = new_start + state.duration
        self.undo_stack.push(
            MoveUndo(
                event_id=state.event.id,
                calendar_id=state.event.calendar_id,
                original_start=state.original_start,
                original_end=state.original_end,
            )
        )
        logger.debug("Rescheduling %s to %s", state.event.id, new_start)
        return RescheduleIntent(event=state.event, new_start=new_start, new_end=new_end)

    def cancel(self) -> None:
        self.state = IDLE


def active_mode(
    selection: DragSelectionController, rescheduling: DragRescheduleController
) -> Optional[GestureMode]:
    if rescheduling.is_active:
        return GestureMode.RESCHEDULING
    if selection.is_active:
        return GestureMode.CREATING
    return None
