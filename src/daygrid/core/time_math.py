from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import List, Optional

MINUTES_PER_DAY = 24 * 60

_OFFSET_PATTERN = re.compile(r"^(?:UTC)?([+-])(\d{1,2}):?(\d{2})?$")


def clamp_minutes(minutes: float) -> int:
    return int(max(0, min(MINUTES_PER_DAY, minutes)))


def offset_minutes(instant: datetime, day: date) -> int:
    """Minutes since local midnight of ``day``, clamped to [0, 1440]."""

    midnight = datetime.combine(day, time(), tzinfo=instant.tzinfo)
    return clamp_minutes(math.floor((instant - midnight).total_seconds() / 60))


def pixels_from_minutes(minutes: float, hour_height: float) -> float:
    return minutes / 60 * hour_height


def minutes_from_pixels(y: float, hour_height: float) -> int:
    return math.floor(y / hour_height * 60)


def clamped_minutes_from_pixels(y: float, hour_height: float) -> int:
    """Like ``minutes_from_pixels`` but pinned to the grid, for pointers above or below it."""

    return clamp_minutes(minutes_from_pixels(y, hour_height))


def snap(minutes: float, granularity: int) -> int:
    """Round to the nearest multiple of ``granularity`` (halves up), then clamp."""

    if granularity <= 0:
        raise ValueError("granularity must be positive")
    return clamp_minutes(math.floor(minutes / granularity + 0.5) * granularity)


def at_minutes(day: date, minutes: int, tz: Optional[tzinfo] = None) -> datetime:
    return datetime.combine(day, time(), tzinfo=tz) + timedelta(minutes=minutes)


def now_line_offset(now: datetime, hour_height: float) -> float:
    return pixels_from_minutes(now.hour * 60 + now.minute, hour_height)


def week_days(anchor: date) -> List[date]:
    """The seven days of the Sunday-based week containing ``anchor``."""

    sunday = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    return [sunday + timedelta(days=index) for index in range(7)]


def month_days(anchor: date) -> List[date]:
    """Whole Sunday-based weeks covering the month of ``anchor``; always a multiple of seven."""

    first = anchor.replace(day=1)
    last = shift_month(first, 1) - timedelta(days=1)
    start = week_days(first)[0]
    end = week_days(last)[-1]
    return [start + timedelta(days=index) for index in range((end - start).days + 1)]


def shift_month(anchor: date, months: int) -> date:
    """Same day ``months`` away, pulled back to the last day of shorter months."""

    index = anchor.year * 12 + anchor.month - 1 + months
    year, month = divmod(index, 12)
    month += 1
    following = date(year + (month == 12), month % 12 + 1, 1)
    return date(year, month, min(anchor.day, (following - timedelta(days=1)).day))


def timezone_from_offset(value: Optional[str]) -> tzinfo:
    """Parse a single offset string such as ``-08:00``; anything else means UTC."""

    if not value:
        return timezone.utc
    match = _OFFSET_PATTERN.match(value.strip())
    if not match:
        return timezone.utc
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes or 0))
    return timezone(-delta if sign == "-" else delta)


def offset_string(tz: tzinfo) -> str:
    delta = tz.utcoffset(None) or timedelta(0)
    total = int(delta.total_seconds() // 60)
    sign = "-" if total < 0 else "+"
    total = abs(total)
    return f"{sign}{total // 60:02d}:{total % 60:02d}"
