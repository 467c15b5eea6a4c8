from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import List, Optional

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QCloseEvent, QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QSplitter,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from ..config import AppPalette
from ..core import CreateIntent, RescheduleIntent
from ..core.time_math import month_days, shift_month, week_days
from ..domain import Event, EventPatch, TimedEvent, ViewMode
from ..llm import CommandPlanner
from ..services import (
    AgendaService,
    CalendarService,
    ColorRuleService,
    CommandService,
    MutationResult,
    ServiceContext,
)
from ..services.agenda import PRESET_TYPES
from ..utils.qt import TaskRunner
from .components.calendar_grid import CalendarGrid
from .components.color_rules_dialog import ColorRulesDialog
from .components.command_panel import CommandPanel
from .components.event_dialog import EventDialog
from .components.month_grid import MonthGrid
from .components.sidebar import Sidebar
from .components.task_dialog import TaskDialog

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, *, context: ServiceContext, palette: Optional[AppPalette] = None) -> None:
        super().__init__()
        self.context = context
        self.settings = context.settings
        self.tz = self.settings.ui.tz
        # store calls share one serial runner; model calls get their own
        self.runner = TaskRunner()
        self.planning_runner = TaskRunner()
        self.calendar = CalendarService(context)
        self.color_rules = ColorRuleService(context.preferences)
        self.agenda = AgendaService(context.preferences)
        commands: Optional[CommandService] = None
        if self.settings.llm.is_configured:
            commands = CommandService(self.calendar, CommandPlanner(self.settings.llm, tz=self.tz))

        self.mode = ViewMode.WEEK
        self.anchor: date = datetime.now(self.tz).date()

        self.setWindowTitle(self.settings.ui.app_name)
        self.resize(1400, 860)

        grid_settings = self.settings.grid
        self.grid = CalendarGrid(
            undo_stack=context.undo,
            palette=palette or AppPalette(),
            tz=self.tz,
            create_snap=grid_settings.create_snap_minutes,
            min_create=grid_settings.min_create_minutes,
            reschedule_snap=grid_settings.reschedule_snap_minutes,
        )
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self.grid)
        self.month_grid = MonthGrid(palette=palette or AppPalette(), tz=self.tz)
        self.views = QStackedWidget()
        self.views.addWidget(scroll)
        self.views.addWidget(self.month_grid)

        self.sidebar = Sidebar()
        self.command_panel = CommandPanel(service=commands, runner=self.runner, planning_runner=self.planning_runner)

        center = QWidget()
        center_layout = QVBoxLayout(center)
        center_layout.setContentsMargins(0, 0, 0, 0)
        center_layout.addLayout(self._build_toolbar())
        center_layout.addWidget(self.views, stretch=1)

        splitter = QSplitter()
        splitter.setOrientation(Qt.Orientation.Horizontal)
        splitter.addWidget(self.sidebar)
        splitter.addWidget(center)
        splitter.addWidget(self.command_panel)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 4)
        splitter.setStretchFactor(2, 2)
        self.setCentralWidget(splitter)

        self.grid.create_requested.connect(self.create_from_intent)
        self.grid.reschedule_requested.connect(self.reschedule)
        self.grid.event_activated.connect(self.edit_event)
        self.sidebar.done_toggled.connect(self.toggle_done)
        self.sidebar.type_toggled.connect(self.toggle_agenda_type)
        self.sidebar.type_added.connect(self.add_agenda_type)
        self.sidebar.type_removed.connect(self.remove_agenda_type)
        self.sidebar.task_requested.connect(self.add_task)
        self.sidebar.task_deleted.connect(self.delete_task)
        self.month_grid.day_activated.connect(self.open_day)
        self.sidebar.color_rules_requested.connect(self.open_color_rules)
        self.command_panel.calendar_changed.connect(self.refresh)

        undo_shortcut = QShortcut(QKeySequence(QKeySequence.StandardKey.Undo), self)
        undo_shortcut.activated.connect(self.undo)

        self._clock = QTimer(self)
        self._clock.timeout.connect(self.grid.update)
        self._clock.start(60_000)

        self._apply_rules()
        self._apply_view()
        self.refresh()

    # ------------------------------------------------------------------ layout

    def _build_toolbar(self) -> QHBoxLayout:
        row = QHBoxLayout()
        row.setContentsMargins(12, 8, 12, 8)
        for label, handler in (("Today", self.go_today), ("<", self.go_previous), (">", self.go_next)):
            button = QPushButton(label)
            button.clicked.connect(handler)
            row.addWidget(button)
        self.range_label = QLabel("")
        self.range_label.setObjectName("rangeTitle")
        row.addWidget(self.range_label, stretch=1)
        self.mode_box = QComboBox()
        for mode in (ViewMode.DAY, ViewMode.WEEK, ViewMode.MONTH):
            self.mode_box.addItem(mode.value.title(), mode)
        self.mode_box.currentIndexChanged.connect(self._mode_selected)
        row.addWidget(self.mode_box)
        refresh_button = QPushButton("Refresh")
        refresh_button.clicked.connect(self.refresh)
        row.addWidget(refresh_button)
        self.undo_button = QPushButton("Undo")
        self.undo_button.clicked.connect(self.undo)
        row.addWidget(self.undo_button)
        return row

    def visible_days(self) -> List[date]:
        if self.mode is ViewMode.DAY:
            return [self.anchor]
        if self.mode is ViewMode.MONTH:
            return month_days(self.anchor)
        return week_days(self.anchor)

    def _apply_view(self) -> None:
        days = self.visible_days()
        ui, grid = self.settings.ui, self.settings.grid
        self.mode_box.blockSignals(True)
        self.mode_box.setCurrentIndex(self.mode_box.findData(self.mode))
        self.mode_box.blockSignals(False)
        if self.mode is ViewMode.MONTH:
            self.range_label.setText(self.anchor.strftime("%B %Y"))
            self.views.setCurrentWidget(self.month_grid)
        elif self.mode is ViewMode.DAY:
            self.grid.configure(days, hour_height=ui.day_hour_height, min_visual_minutes=grid.day_min_visual_minutes)
            self.range_label.setText(self.anchor.strftime("%A, %d %B %Y"))
            self.views.setCurrentIndex(0)
        else:
            self.grid.configure(days, hour_height=ui.week_hour_height, min_visual_minutes=grid.week_min_visual_minutes)
            self.range_label.setText(f"{days[0].strftime('%d %b')} - {days[-1].strftime('%d %b %Y')}")
            self.views.setCurrentIndex(0)
        self._populate()

    def _populate(self) -> None:
        days = self.visible_days()
        if self.mode is ViewMode.MONTH:
            self.month_grid.set_month(days, self.anchor.month, {day: self.calendar.events_for_day(day) for day in days})
        else:
            self.grid.set_events(
                {day: self.calendar.timed_for_day(day) for day in days},
                {day: self.calendar.all_day_for_day(day) for day in days},
            )
            self.grid.updateGeometry()
        upcoming = self.agenda.upcoming(self.calendar.all_events(), datetime.now(self.tz))
        self.sidebar.set_items(upcoming, self.agenda.enabled_types(), self.agenda.custom_types())
        self.undo_button.setEnabled(self.context.undo.has_entries() or self.runner.busy)

    # ------------------------------------------------------------------ navigation

    def _mode_selected(self, index: int) -> None:
        self.mode = self.mode_box.itemData(index)
        self._move_to(self.anchor)

    def open_day(self, day: date) -> None:
        self.mode = ViewMode.DAY
        self._move_to(day)

    def go_today(self) -> None:
        self._move_to(datetime.now(self.tz).date())

    def go_previous(self) -> None:
        self._move_to(self._step(-1))

    def go_next(self) -> None:
        self._move_to(self._step(1))

    def _step(self, direction: int) -> date:
        if self.mode is ViewMode.MONTH:
            return shift_month(self.anchor, direction)
        return self.anchor + timedelta(days=direction * (1 if self.mode is ViewMode.DAY else 7))

    def _move_to(self, anchor: date) -> None:
        self.anchor = anchor
        self._apply_view()
        days = self.visible_days()
        if not self.context.cache.covers(days[0], days[-1]):
            self.refresh()

    # ------------------------------------------------------------------ data

    def refresh(self) -> None:
        self.statusBar().showMessage("Loading events...")

        def done(events: List[Event]) -> None:
            self.statusBar().showMessage(f"Loaded {len(events)} events.", 3000)
            self._populate()

        days = self.visible_days()
        # centre the fetch window on the view so a six-week month grid stays inside it
        centre = days[len(days) // 2]
        self.runner.submit(self.calendar.refresh, centre, on_success=done, on_error=self._handle_error)

    def _after_mutation(self, result: MutationResult) -> None:
        self.statusBar().showMessage(result.message, 5000)
        self.refresh()

    # ------------------------------------------------------------------ gestures

    def create_from_intent(self, intent: CreateIntent) -> None:
        dialog = EventDialog(default_start=intent.start, default_end=intent.end, tz=self.tz, parent=self)
        if dialog.exec() != EventDialog.DialogCode.Accepted:
            return
        values = dialog.values()
        if not values["summary"]:
            QMessageBox.warning(self, "Missing title", "Provide a title for the event.")
            return
        if values["end"] <= values["start"]:
            QMessageBox.warning(self, "Invalid time", "The event must end after it starts.")
            return
        self.runner.submit(
            self.calendar.create_event,
            values["summary"],
            values["start"],
            values["end"],
            values["description"],
            on_success=self._after_mutation,
            on_error=self._handle_error,
        )

    def reschedule(self, intent: RescheduleIntent) -> None:
        self.statusBar().showMessage(f"Moving \"{intent.event.summary}\"...")
        self.context.cache.replace(replace(intent.event, start=intent.new_start, end=intent.new_end))
        self._populate()
        self.runner.submit(
            self.calendar.reschedule, intent, on_success=self._after_mutation, on_error=self._handle_error
        )

    def edit_event(self, event: Event) -> None:
        if not isinstance(event, TimedEvent):
            return
        dialog = EventDialog(
            default_start=event.start,
            default_end=event.end,
            tz=self.tz,
            summary=event.summary,
            description=event.description,
            allow_delete=True,
            parent=self,
        )
        if dialog.exec() != EventDialog.DialogCode.Accepted:
            return
        if dialog.delete_requested:
            self.runner.submit(
                self.calendar.delete_event, event, on_success=self._after_mutation, on_error=self._handle_error
            )
            return
        values = dialog.values()
        patch = EventPatch(
            summary=values["summary"] if values["summary"] != event.summary else None,
            description=values["description"] if values["description"] != event.description else None,
            start=values["start"] if values["start"] != event.start else None,
            end=values["end"] if values["end"] != event.end else None,
        )
        self.runner.submit(
            self.calendar.edit_event, event, patch, on_success=self._after_mutation, on_error=self._handle_error
        )

    def undo(self) -> None:
        # a queued mutation may still push its entry ahead of this job
        if not self.context.undo.has_entries() and not self.runner.busy:
            self.statusBar().showMessage("Nothing to undo.", 3000)
            return

        def done(undone: bool) -> None:
            self.statusBar().showMessage("Undone." if undone else "Undo failed.", 4000)
            self.refresh()

        self.runner.submit(self.calendar.undo_last, on_success=done, on_error=self._handle_error)

    # ------------------------------------------------------------------ sidebar

    def toggle_done(self, event_id: str) -> None:
        self.agenda.toggle_done(event_id)
        self._populate()

    def toggle_agenda_type(self, item_type: str) -> None:
        self.agenda.toggle_type(item_type)
        self._populate()

    def add_agenda_type(self, item_type: str) -> None:
        self.agenda.add_type(item_type)
        self._populate()

    def remove_agenda_type(self, item_type: str) -> None:
        self.agenda.remove_type(item_type)
        self._populate()

    def add_task(self) -> None:
        types = list(PRESET_TYPES) + self.agenda.custom_types()
        dialog = TaskDialog(default_due=datetime.now(self.tz) + timedelta(hours=1), types=types, tz=self.tz, parent=self)
        if dialog.exec() != TaskDialog.DialogCode.Accepted:
            return
        values = dialog.values()
        if self.agenda.add_task(values["summary"], values["due"], values["item_type"]) is None:
            QMessageBox.warning(self, "Missing title", "Provide a title for the task.")
            return
        self._populate()

    def delete_task(self, task_id: str) -> None:
        self.agenda.delete_task(task_id)
        self._populate()

    def open_color_rules(self) -> None:
        dialog = ColorRulesDialog(service=self.color_rules, parent=self)
        dialog.exec()
        self._apply_rules()

    # ------------------------------------------------------------------ misc

    def _apply_rules(self) -> None:
        rules = self.color_rules.load()
        self.grid.set_rules(rules)
        self.month_grid.set_rules(rules)

    def closeEvent(self, event: QCloseEvent) -> None:
        # let queued store calls land before the process exits
        self.runner.wait(3000)
        super().closeEvent(event)

    def _handle_error(self, exc: Exception) -> None:
        logger.error("Background task failed: %s", exc)
        self.statusBar().showMessage(f"Error: {exc}", 5000)
        QMessageBox.critical(self, "Error", str(exc))
