from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from PyQt6.QtCore import QPointF, QRectF, QSize, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QMouseEvent, QPainter, QPaintEvent, QPen
from PyQt6.QtWidgets import QSizePolicy, QWidget

from ...config import AppPalette
from ...core.colors import resolve_event_color
from ...core.layout import MonthCell, month_cell
from ...domain import ColorRule, Event

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
HEADER_HEIGHT = 28
CELL_MIN_HEIGHT = 110
DAY_NUMBER_HEIGHT = 24
CHIP_HEIGHT = 18


class MonthGrid(QWidget):
    """Read-only month overview; double-clicking a day opens it in the day view."""

    day_activated = pyqtSignal(object)

    def __init__(self, *, palette: AppPalette, tz: Optional[tzinfo] = None) -> None:
        super().__init__()
        self.setObjectName("monthGrid")
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.palette_colors = palette
        self.tz = tz
        self.month = date.today().month
        self.rules: List[ColorRule] = []
        self._cells: List[MonthCell] = []

    def set_rules(self, rules: Iterable[ColorRule]) -> None:
        self.rules = list(rules)
        self.update()

    def set_month(self, days: Sequence[date], month: int, events: Dict[date, List[Event]]) -> None:
        self.month = month
        self._cells = [month_cell(events.get(day, []), day, month) for day in days]
        self.setMinimumHeight(self.sizeHint().height())
        self.update()

    def sizeHint(self) -> QSize:
        return QSize(800, HEADER_HEIGHT + self._rows() * CELL_MIN_HEIGHT)

    def _rows(self) -> int:
        return max(1, len(self._cells) // 7)

    def _cell_rect(self, index: int) -> QRectF:
        width = self.width() / 7
        height = (self.height() - HEADER_HEIGHT) / self._rows()
        row, column = divmod(index, 7)
        return QRectF(column * width, HEADER_HEIGHT + row * height, width, height)

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:
        point: QPointF = event.position()
        for index, cell in enumerate(self._cells):
            if self._cell_rect(index).contains(point):
                self.day_activated.emit(cell.day)
                return

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        palette = self.palette_colors
        painter.fillRect(self.rect(), QColor(palette.background_primary))

        width = self.width() / 7
        painter.setPen(QPen(QColor(palette.text_muted)))
        for column, name in enumerate(WEEKDAY_NAMES):
            painter.drawText(QRectF(column * width, 0, width, HEADER_HEIGHT), Qt.AlignmentFlag.AlignCenter, name.upper())

        today = datetime.now(self.tz).date()
        for index, cell in enumerate(self._cells):
            self._paint_cell(painter, self._cell_rect(index), cell, cell.day == today)
        painter.end()

    def _paint_cell(self, painter: QPainter, rect: QRectF, cell: MonthCell, is_today: bool) -> None:
        palette = self.palette_colors
        if not cell.in_month:
            painter.fillRect(rect, QColor(palette.background_secondary))
        elif is_today:
            painter.fillRect(rect, QColor(palette.today_tint))
        painter.setPen(QPen(QColor(palette.grid_line)))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(rect)

        number_rect = QRectF(rect.left(), rect.top() + 2, rect.width(), DAY_NUMBER_HEIGHT)
        if is_today:
            painter.setPen(QPen(QColor(palette.accent_primary)))
        elif cell.in_month:
            painter.setPen(QPen(QColor(palette.text_primary)))
        else:
            painter.setPen(QPen(QColor(palette.text_muted)))
        painter.drawText(number_rect, Qt.AlignmentFlag.AlignCenter, str(cell.day.day))

        top = rect.top() + DAY_NUMBER_HEIGHT + 4
        for position, item in enumerate(cell.events):
            chip = QRectF(rect.left() + 4, top + position * (CHIP_HEIGHT + 2), rect.width() - 8, CHIP_HEIGHT)
            # ordinal is the position within the cell
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QColor(resolve_event_color(item, position, self.rules)))
            painter.drawRoundedRect(chip, 3, 3)
            painter.setPen(QPen(QColor("#ffffff")))
            painter.drawText(chip.adjusted(6, 0, -4, 0), Qt.AlignmentFlag.AlignVCenter, item.summary)
        if cell.hidden:
            more = QRectF(
                rect.left(), top + len(cell.events) * (CHIP_HEIGHT + 2), rect.width(), CHIP_HEIGHT
            )
            painter.setPen(QPen(QColor(palette.text_muted)))
            painter.drawText(more, Qt.AlignmentFlag.AlignCenter, f"+{cell.hidden} more")
