from datetime import timedelta

import orjson

from conftest import DAY, timed
from daygrid.cli import build_parser, format_day, load_events
from daygrid.domain import AllDayEvent


def test_layout_command_prints_columns(tmp_path):
    records = [
        timed("a", "09:00", "10:00", summary="Standup").to_record(),
        timed("b", "09:30", "10:30", summary="Review").to_record(),
        AllDayEvent(id="h", summary="Holiday", start=DAY, end=DAY + timedelta(days=1)).to_record(),
        {"id": "broken"},
    ]
    path = tmp_path / "events.json"
    path.write_bytes(orjson.dumps(records))

    lines = format_day(load_events(path), DAY, "+00:00")

    assert lines == [
        "Holiday (all day)",
        "09:00-10:00  column 1/2  Standup",
        "09:30-10:30  column 2/2  Review",
    ]


def test_parser_reads_layout_arguments(tmp_path):
    args = build_parser().parse_args(["layout", str(tmp_path / "e.json"), "--day", "2026-01-22", "--tz", "-08:00"])
    assert args.day == DAY
    assert args.tz == "-08:00"
