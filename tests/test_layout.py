from datetime import timedelta
from itertools import permutations

import pytest

from conftest import DAY, at, timed
from daygrid.core.layout import layout, month_cell, position_boxes, timed_span
from daygrid.domain import AllDayEvent, ColumnLayout, TimedEvent


@pytest.fixture
def staggered():
    return [
        timed("a", "09:00", "10:00"),
        timed("b", "09:30", "10:30"),
        timed("c", "10:00", "11:00"),
        timed("d", "13:00", "14:00"),
    ]


class TestColumnPacking:
    def test_staggered_meetings_share_two_columns(self, staggered):
        result = layout(staggered, DAY)

        assert result["a"] == ColumnLayout(column=0, total_columns=2)
        assert result["b"] == ColumnLayout(column=1, total_columns=2)
        assert result["c"] == ColumnLayout(column=0, total_columns=2)

    def test_isolated_event_takes_full_width(self, staggered):
        assert layout(staggered, DAY)["d"] == ColumnLayout(column=0, total_columns=1)

    def test_overlapping_events_get_distinct_columns(self, staggered):
        result = layout(staggered, DAY)
        assert result["a"].column != result["b"].column
        assert result["b"].column != result["c"].column

    def test_input_order_does_not_matter(self, staggered):
        expected = layout(staggered, DAY)
        for ordering in permutations(staggered):
            assert layout(list(ordering), DAY) == expected

    def test_same_start_breaks_ties_by_id(self):
        events = [timed("z", "09:00", "10:00"), timed("m", "09:00", "10:00")]
        result = layout(events, DAY)
        assert result["m"].column == 0
        assert result["z"].column == 1

    def test_back_to_back_events_reuse_a_column(self):
        events = [timed("first", "08:00", "09:00"), timed("second", "09:00", "10:00")]
        result = layout(events, DAY)
        assert result["first"] == result["second"] == ColumnLayout(column=0, total_columns=1)

    def test_empty_day(self):
        assert layout([], DAY) == {}


class TestEligibility:
    def test_event_running_past_midnight_is_clamped(self):
        late = TimedEvent(id="late", summary="late", start=at(DAY, "23:00"), end=at(DAY + timedelta(days=1), "01:00"))
        span = timed_span(late, DAY)
        assert (span.start_minutes, span.end_minutes) == (23 * 60, 1440)

    def test_event_ending_at_next_midnight_fills_the_day(self):
        late = TimedEvent(id="late", summary="late", start=at(DAY, "22:00"), end=at(DAY + timedelta(days=1), "00:00"))
        assert timed_span(late, DAY).end_minutes == 1440

    def test_sub_minute_event_keeps_its_own_minute(self):
        blip = TimedEvent(id="blip", summary="blip", start=at(DAY, "10:00"), end=at(DAY, "10:00") + timedelta(seconds=30))
        span = timed_span(blip, DAY)
        assert (span.start_minutes, span.end_minutes) == (600, 601)

    def test_sub_minute_event_does_not_widen_later_events(self):
        blip = TimedEvent(id="blip", summary="blip", start=at(DAY, "10:00"), end=at(DAY, "10:00") + timedelta(seconds=30))
        result = layout([blip, timed("later", "15:00", "16:00")], DAY)
        assert result["later"] == ColumnLayout(column=0, total_columns=1)
        assert result["blip"] == ColumnLayout(column=0, total_columns=1)

    def test_seconds_precision_end_rounds_up_within_the_day(self):
        event = TimedEvent(
            id="s", summary="s", start=at(DAY, "09:00"), end=at(DAY, "09:59") + timedelta(seconds=1)
        )
        assert timed_span(event, DAY).end_minutes == 600

    def test_zero_and_negative_durations_are_skipped(self):
        events = [timed("zero", "10:00", "10:00"), timed("backwards", "11:00", "10:00")]
        assert layout(events, DAY) == {}

    def test_events_on_other_days_are_skipped(self):
        events = [timed("tomorrow", "10:00", "11:00", day=DAY + timedelta(days=1))]
        assert layout(events, DAY) == {}

    def test_all_day_events_are_not_laid_out(self):
        holiday = AllDayEvent(id="holiday", summary="Holiday", start=DAY, end=DAY + timedelta(days=1))
        assert layout([holiday, timed("a", "09:00", "10:00")], DAY).keys() == {"a"}


class TestBoxes:
    def test_fractions_follow_columns(self, staggered):
        boxes = {box.event.id: box for box in position_boxes(staggered, DAY, hour_height=48)}
        assert boxes["a"].left_fraction == 0
        assert boxes["b"].left_fraction == 0.5
        assert boxes["b"].width_fraction == 0.5
        assert boxes["d"].width_fraction == 1

    def test_top_and_height_scale_with_hour_height(self, staggered):
        boxes = {box.event.id: box for box in position_boxes(staggered, DAY, hour_height=48)}
        assert boxes["a"].top == 9 * 48
        assert boxes["a"].height == 48

    def test_short_events_get_a_minimum_visual_height(self):
        short = [timed("standup", "09:00", "09:10")]
        week_box = position_boxes(short, DAY, hour_height=48)[0]
        day_box = position_boxes(short, DAY, hour_height=60, min_visual_minutes=30)[0]
        assert week_box.height == pytest.approx(16)
        assert day_box.height == 30

    def test_visual_floor_does_not_change_packing(self):
        events = [timed("short", "09:00", "09:05"), timed("next", "09:10", "10:00")]
        result = layout(events, DAY)
        assert result["short"].total_columns == 1
        assert result["next"].total_columns == 1


class TestMonthCell:
    def test_all_day_items_lead_and_overflow_is_counted(self):
        trip = AllDayEvent(id="trip", summary="Trip", start=DAY, end=DAY + timedelta(days=1))
        events = [
            timed("late", "18:00", "19:00"),
            timed("early", "08:00", "09:00"),
            trip,
            timed("noon", "12:00", "13:00"),
            timed("night", "21:00", "22:00"),
        ]
        cell = month_cell(events, DAY, DAY.month)
        assert [event.id for event in cell.events] == ["trip", "early", "noon"]
        assert cell.hidden == 2
        assert cell.in_month

    def test_padding_days_are_marked_outside_the_month(self):
        cell = month_cell([], DAY - timedelta(days=30), DAY.month)
        assert not cell.in_month
        assert (cell.events, cell.hidden) == ((), 0)
