from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from PyQt6.QtCore import QPointF, QRectF, QSize, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QMouseEvent, QPainter, QPaintEvent, QPen
from PyQt6.QtWidgets import QApplication, QSizePolicy, QWidget

from ...config import AppPalette
from ...core import (
    CreateIntent,
    DragRescheduleController,
    DragSelectionController,
    EventBox,
    UndoStack,
    active_mode,
    position_boxes,
)
from ...core.colors import resolve_event_color
from ...core.time_math import (
    MINUTES_PER_DAY,
    clamped_minutes_from_pixels,
    minutes_from_pixels,
    now_line_offset,
    offset_minutes,
    pixels_from_minutes,
)
from ...domain import AllDayEvent, ColorRule, Event, GestureMode, TimedEvent

GUTTER_WIDTH = 56
HEADER_HEIGHT = 30
ALL_DAY_ROW = 20


class CalendarGrid(QWidget):
    """Day or week time grid with drag-to-create and drag-to-reschedule."""

    create_requested = pyqtSignal(object)
    reschedule_requested = pyqtSignal(object)
    event_activated = pyqtSignal(object)

    def __init__(
        self,
        *,
        undo_stack: UndoStack,
        palette: AppPalette,
        tz: Optional[tzinfo] = None,
        create_snap: int = 15,
        min_create: int = 15,
        reschedule_snap: int = 5,
    ) -> None:
        super().__init__()
        self.setObjectName("calendarGrid")
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        self.palette_colors = palette
        self.tz = tz
        self.selection = DragSelectionController(granularity=create_snap, min_minutes=min_create, tz=tz)
        self.rescheduling = DragRescheduleController(undo_stack=undo_stack, granularity=reschedule_snap)

        self.days: List[date] = [date.today()]
        self.hour_height = 48.0
        self.min_visual_minutes = 20
        self.rules: List[ColorRule] = []
        self._timed: Dict[date, List[TimedEvent]] = {}
        self._all_day: Dict[date, List[AllDayEvent]] = {}
        self._ordinal: Dict[str, int] = {}
        self._boxes: Dict[date, List[EventBox]] = {}
        self._press_point: Optional[QPointF] = None

    # ------------------------------------------------------------------ data

    def configure(self, days: Sequence[date], *, hour_height: float, min_visual_minutes: int) -> None:
        self.days = list(days)
        self.hour_height = hour_height
        self.min_visual_minutes = min_visual_minutes
        self._relayout()
        self.updateGeometry()

    def set_rules(self, rules: Iterable[ColorRule]) -> None:
        self.rules = list(rules)
        self.update()

    def set_events(self, timed: Dict[date, List[TimedEvent]], all_day: Dict[date, List[AllDayEvent]]) -> None:
        self._timed = timed
        self._all_day = all_day
        ordered: List[Event] = [event for day in self.days for event in all_day.get(day, [])]
        ordered += [event for day in self.days for event in sorted(timed.get(day, []), key=lambda e: e.start)]
        self._ordinal = {}
        for event in ordered:
            self._ordinal.setdefault(event.id, len(self._ordinal))
        self._relayout()

    def _relayout(self) -> None:
        self._boxes = {
            day: position_boxes(
                self._timed.get(day, []),
                day,
                hour_height=self.hour_height,
                min_visual_minutes=self.min_visual_minutes,
            )
            for day in self.days
        }
        self.setMinimumHeight(self.sizeHint().height())
        self.update()

    # ------------------------------------------------------------------ geometry

    @property
    def top_offset(self) -> float:
        rows = max((len(self._all_day.get(day, [])) for day in self.days), default=0)
        return HEADER_HEIGHT + rows * ALL_DAY_ROW

    def sizeHint(self) -> QSize:
        return QSize(800, int(self.top_offset + pixels_from_minutes(MINUTES_PER_DAY, self.hour_height)))

    def _day_width(self) -> float:
        return max(1.0, (self.width() - GUTTER_WIDTH) / max(1, len(self.days)))

    def _day_left(self, index: int) -> float:
        return GUTTER_WIDTH + index * self._day_width()

    def _hit(self, point: QPointF) -> Optional[Tuple[date, int]]:
        y = point.y() - self.top_offset
        if point.x() < GUTTER_WIDTH or y < 0 or point.x() >= self.width():
            return None
        index = int((point.x() - GUTTER_WIDTH) // self._day_width())
        if index >= len(self.days):
            return None
        return self.days[index], minutes_from_pixels(y, self.hour_height)

    def _box_rect(self, index: int, box: EventBox) -> QRectF:
        width = self._day_width()
        return QRectF(
            self._day_left(index) + box.left_fraction * width + 1,
            self.top_offset + box.top,
            box.width_fraction * width - 2,
            box.height - 1,
        )

    def _box_at(self, point: QPointF) -> Optional[Tuple[date, EventBox]]:
        for index, day in enumerate(self.days):
            # topmost first, boxes are painted in list order
            for box in reversed(self._boxes.get(day, [])):
                if self._box_rect(index, box).contains(point):
                    return day, box
        return None

    def _span_rect(self, day: date, start: int, end: int) -> Optional[QRectF]:
        if day not in self.days:
            return None
        index = self.days.index(day)
        return QRectF(
            self._day_left(index) + 2,
            self.top_offset + pixels_from_minutes(start, self.hour_height),
            self._day_width() - 4,
            pixels_from_minutes(max(end - start, 1), self.hour_height),
        )

    # ------------------------------------------------------------------ pointer

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            return
        point = event.position()
        hit = self._hit(point)
        grabbed = self._box_at(point)
        if grabbed is not None and hit is not None:
            day, box = grabbed
            self._press_point = point
            self.rescheduling.start(box.event, grab_minutes=hit[1] - offset_minutes(box.event.start, day))
        elif hit is not None:
            self.selection.press(*hit)
        self.update()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        point = event.position()
        mode = active_mode(self.selection, self.rescheduling)
        if mode is GestureMode.RESCHEDULING:
            if not self._past_drag_distance(point):
                return
            hit = self._hit(point)
            if hit is None:
                self.rescheduling.leave_grid()
            else:
                self.rescheduling.drag_over(*hit)
        elif mode is GestureMode.CREATING:
            self.selection.move(clamped_minutes_from_pixels(point.y() - self.top_offset, self.hour_height))
        self.update()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        mode = active_mode(self.selection, self.rescheduling)
        if mode is GestureMode.RESCHEDULING:
            intent = self.rescheduling.drop()
            if intent is not None:
                self.reschedule_requested.emit(intent)
        elif mode is GestureMode.CREATING:
            self._finish_selection(self.selection.release())
        self._press_point = None
        self.update()

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:
        self.rescheduling.cancel()
        self._press_point = None
        grabbed = self._box_at(event.position())
        if grabbed is not None:
            self.event_activated.emit(grabbed[1].event)

    def leaveEvent(self, event) -> None:
        mode = active_mode(self.selection, self.rescheduling)
        if mode is GestureMode.CREATING:
            self._finish_selection(self.selection.leave())
        elif mode is GestureMode.RESCHEDULING:
            self.rescheduling.leave_grid()
        self.update()
        super().leaveEvent(event)

    def _past_drag_distance(self, point: QPointF) -> bool:
        if self._press_point is None:
            return True
        if (point - self._press_point).manhattanLength() < QApplication.startDragDistance():
            return False
        self._press_point = None
        return True

    def _finish_selection(self, intent: Optional[CreateIntent]) -> None:
        if intent is not None:
            self.create_requested.emit(intent)

    # ------------------------------------------------------------------ painting

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        palette = self.palette_colors
        painter.fillRect(self.rect(), QColor(palette.background_primary))
        self._paint_grid(painter)
        self._paint_headers(painter)
        self._paint_events(painter)
        self._paint_previews(painter)
        self._paint_now_line(painter)
        painter.end()

    def _paint_grid(self, painter: QPainter) -> None:
        palette = self.palette_colors
        top = self.top_offset
        today = datetime.now(self.tz).date()
        for index, day in enumerate(self.days):
            if day == today:
                painter.fillRect(
                    QRectF(self._day_left(index), top, self._day_width(), self.height() - top),
                    QColor(palette.today_tint),
                )
        painter.setPen(QPen(QColor(palette.grid_line)))
        for hour in range(24):
            y = top + pixels_from_minutes(hour * 60, self.hour_height)
            painter.drawLine(QPointF(GUTTER_WIDTH, y), QPointF(self.width(), y))
            painter.setPen(QPen(QColor(palette.text_muted)))
            painter.drawText(QRectF(0, y, GUTTER_WIDTH - 6, 14), Qt.AlignmentFlag.AlignRight, f"{hour:02d}:00")
            painter.setPen(QPen(QColor(palette.grid_line)))
        for index in range(len(self.days) + 1):
            x = self._day_left(index)
            painter.drawLine(QPointF(x, 0), QPointF(x, self.height()))

    def _paint_headers(self, painter: QPainter) -> None:
        palette = self.palette_colors
        width = self._day_width()
        for index, day in enumerate(self.days):
            left = self._day_left(index)
            painter.setPen(QPen(QColor(palette.text_primary)))
            painter.drawText(
                QRectF(left, 0, width, HEADER_HEIGHT),
                Qt.AlignmentFlag.AlignCenter,
                day.strftime("%a %d"),
            )
            for row, item in enumerate(self._all_day.get(day, [])):
                rect = QRectF(left + 2, HEADER_HEIGHT + row * ALL_DAY_ROW + 1, width - 4, ALL_DAY_ROW - 2)
                color = resolve_event_color(item, self._ordinal.get(item.id, 0), self.rules)
                painter.fillRect(rect, QColor(color))
                painter.setPen(QPen(QColor("#ffffff")))
                painter.drawText(rect.adjusted(4, 0, -2, 0), Qt.AlignmentFlag.AlignVCenter, item.summary)

    def _paint_events(self, painter: QPainter) -> None:
        dragged = self.rescheduling.dragged_event_id
        for index, day in enumerate(self.days):
            for box in self._boxes.get(day, []):
                rect = self._box_rect(index, box)
                color = QColor(resolve_event_color(box.event, self._ordinal.get(box.event.id, 0), self.rules))
                if box.event.id == dragged:
                    color.setAlpha(90)
                painter.setPen(Qt.PenStyle.NoPen)
                painter.setBrush(color)
                painter.drawRoundedRect(rect, 4, 4)
                painter.setPen(QPen(QColor("#ffffff")))
                label = f"{box.event.summary}\n{box.event.start.strftime('%H:%M')}-{box.event.end.strftime('%H:%M')}"
                painter.drawText(rect.adjusted(4, 2, -2, -2), Qt.TextFlag.TextWordWrap, label)

    def _paint_previews(self, painter: QPainter) -> None:
        accent = QColor(self.palette_colors.accent_primary)
        selection = self.selection.preview()
        if selection is not None:
            rect = self._span_rect(*selection)
            if rect is not None:
                fill = QColor(accent)
                fill.setAlpha(110)
                painter.setPen(Qt.PenStyle.NoPen)
                painter.setBrush(fill)
                painter.drawRoundedRect(rect, 4, 4)
        target = self.rescheduling.preview()
        if target is not None:
            rect = self._span_rect(*target)
            if rect is not None:
                pen = QPen(accent)
                pen.setStyle(Qt.PenStyle.DashLine)
                pen.setWidth(2)
                painter.setPen(pen)
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.drawRoundedRect(rect, 4, 4)

    def _paint_now_line(self, painter: QPainter) -> None:
        now = datetime.now(self.tz)
        if now.date() not in self.days:
            return
        index = self.days.index(now.date())
        y = self.top_offset + now_line_offset(now, self.hour_height)
        painter.setPen(QPen(QColor(self.palette_colors.now_line), 2))
        painter.drawLine(QPointF(self._day_left(index), y), QPointF(self._day_left(index) + self._day_width(), y))
