from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

import orjson

from .bootstrap import configure_logging
from .core.layout import layout_spans
from .core.time_math import timezone_from_offset
from .data.cache import TimelineCache
from .domain import Event, event_from_record

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Daygrid calendar command line interface.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("gui", help="Launch the desktop calendar.")

    layout_parser = subparsers.add_parser("layout", help="Print the column layout of one day from a JSON export.")
    layout_parser.add_argument("events_file", type=Path, help="JSON list of event records.")
    layout_parser.add_argument("--day", type=date.fromisoformat, default=None, help="ISO date, defaults to today.")
    layout_parser.add_argument("--tz", default="+00:00", help="Display offset such as -08:00.")

    return parser


def load_events(path: Path) -> List[Event]:
    payload = orjson.loads(path.read_bytes())
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON list of events")
    events: List[Event] = []
    for record in payload:
        try:
            events.append(event_from_record(record))
        except (KeyError, ValueError) as exc:
            logger.warning("Skipping event record %s: %s", record.get("id"), exc)
    return events


def format_day(events: Sequence[Event], day: date, tz_offset: str) -> List[str]:
    cache = TimelineCache(tz=timezone_from_offset(tz_offset))
    cache.hydrate(events, window_start=day, window_end=day)
    lines = [f"{item.summary} (all day)" for item in cache.all_day_for_day(day)]
    for span, column in layout_spans(cache.timed_for_day(day), day):
        lines.append(
            f"{span.start_minutes // 60:02d}:{span.start_minutes % 60:02d}-"
            f"{span.end_minutes // 60:02d}:{span.end_minutes % 60:02d}  "
            f"column {column.column + 1}/{column.total_columns}  {span.event.summary}"
        )
    return lines


def main(argv: Optional[Sequence[str]] = None) -> None:
    configure_logging()
    logger.info("Daygrid CLI starting")
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "gui":
        from .ui.app import run_gui

        run_gui()
    elif args.command == "layout":
        day = args.day or date.today()
        for line in format_day(load_events(args.events_file), day, args.tz):
            print(line)
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()


if __name__ == "__main__":
    main()
