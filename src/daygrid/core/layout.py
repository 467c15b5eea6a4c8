"""Column packing for timed events that share a day.

Events are sorted by start minute (ties by id), then placed greedily into the first
column whose last occupant has already ended. Widths are computed per overlap
group rather than for the whole day, so an event that only collides with one
neighbour renders half-width even when the day has many columns elsewhere.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from ..domain import ColumnLayout, Event, TimedEvent
from .time_math import MINUTES_PER_DAY, offset_minutes, pixels_from_minutes

logger = logging.getLogger(__name__)

WEEK_MIN_VISUAL_MINUTES = 20
DAY_MIN_VISUAL_MINUTES = 30


@dataclass(frozen=True, slots=True)
class Span:
    event: TimedEvent
    start_minutes: int
    end_minutes: int

    def overlaps(self, other: "Span") -> bool:
        return self.start_minutes < other.end_minutes and other.start_minutes < self.end_minutes


@dataclass(frozen=True, slots=True)
class EventBox:
    event: TimedEvent
    layout: ColumnLayout
    top: float
    height: float
    left_fraction: float
    width_fraction: float


def timed_span(event: Event, day: date) -> Optional[Span]:
    """Day-relative ``[start, end)`` minutes for ``event``, or ``None`` if it has no place on ``day``."""

    if not isinstance(event, TimedEvent):
        return None
    if event.end is None or event.end <= event.start:
        return None
    midnight = datetime.combine(day, time(), tzinfo=event.start.tzinfo)
    next_midnight = midnight + timedelta(days=1)
    if event.end <= midnight or event.start >= next_midnight:
        return None
    start_minutes = offset_minutes(event.start, day)
    if event.end >= next_midnight:
        # runs into the next day; the remote record keeps its real end
        end_minutes = MINUTES_PER_DAY
    else:
        # a partial trailing minute still occupies that minute
        end_minutes = math.ceil((event.end - midnight).total_seconds() / 60)
    return Span(event=event, start_minutes=start_minutes, end_minutes=end_minutes)


def _sorted_spans(day_events: Iterable[Event], day: date) -> List[Span]:
    spans = [span for span in (timed_span(event, day) for event in day_events) if span is not None]
    return sorted(spans, key=lambda span: (span.start_minutes, span.event.id))


def pack_columns(spans: List[Span]) -> List[List[Span]]:
    columns: List[List[Span]] = []
    for span in spans:
        for column in columns:
            if column[-1].end_minutes <= span.start_minutes:
                column.append(span)
                break
        else:
            columns.append([span])
    return columns


def layout_spans(day_events: Iterable[Event], day: date) -> List[Tuple[Span, ColumnLayout]]:
    spans = _sorted_spans(day_events, day)
    columns = pack_columns(spans)
    column_of: Dict[str, int] = {}
    for index, column in enumerate(columns):
        for span in column:
            column_of[span.event.id] = index

    placed: List[Tuple[Span, ColumnLayout]] = []
    for span in spans:
        own = column_of[span.event.id]
        touching = {own}
        for index, column in enumerate(columns):
            if index in touching:
                continue
            if any(other.overlaps(span) for other in column):
                touching.add(index)
        group = sorted(touching)
        placed.append((span, ColumnLayout(column=group.index(own), total_columns=len(group))))

    logger.debug("Laid out %d events for %s across %d columns", len(placed), day, len(columns))
    return placed


def layout(day_events: Iterable[Event], day: date) -> Dict[str, ColumnLayout]:
    return {span.event.id: column for span, column in layout_spans(day_events, day)}


def position_boxes(
    day_events: Iterable[Event],
    day: date,
    *,
    hour_height: float,
    min_visual_minutes: int = WEEK_MIN_VISUAL_MINUTES,
) -> List[EventBox]:
    boxes: List[EventBox] = []
    for span, column in layout_spans(day_events, day):
        visual_minutes = max(min_visual_minutes, span.end_minutes - span.start_minutes)
        boxes.append(
            EventBox(
                event=span.event,
                layout=column,
                top=pixels_from_minutes(span.start_minutes, hour_height),
                height=pixels_from_minutes(visual_minutes, hour_height),
                left_fraction=column.column / column.total_columns,
                width_fraction=1 / column.total_columns,
            )
        )
    return boxes


MONTH_CELL_LIMIT = 3


@dataclass(frozen=True, slots=True)
class MonthCell:
    day: date
    in_month: bool
    events: Tuple[Event, ...]
    hidden: int


def _month_order(event: Event) -> Tuple[int, datetime]:
    if isinstance(event, TimedEvent):
        return 1, event.start
    return 0, datetime.combine(event.start, time(), tzinfo=timezone.utc)


def month_cell(day_events: Iterable[Event], day: date, month: int, *, limit: int = MONTH_CELL_LIMIT) -> MonthCell:
    """All-day items first, then timed ones by start; anything past ``limit`` is only counted."""

    ordered = sorted(day_events, key=_month_order)
    return MonthCell(
        day=day,
        in_month=day.month == month,
        events=tuple(ordered[:limit]),
        hidden=max(0, len(ordered) - limit),
    )
