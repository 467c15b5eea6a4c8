from __future__ import annotations

from typing import Iterable

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ...services import AgendaItem
from ...services.agenda import PRESET_TYPES


class Sidebar(QWidget):
    """Upcoming agenda with done marks, custom tasks and the type filter."""

    done_toggled = pyqtSignal(str)
    type_toggled = pyqtSignal(str)
    type_added = pyqtSignal(str)
    type_removed = pyqtSignal(str)
    task_requested = pyqtSignal()
    task_deleted = pyqtSignal(str)
    color_rules_requested = pyqtSignal()

    def __init__(self) -> None:
        super().__init__()
        self._task_ids: set[str] = set()
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        layout.addWidget(QLabel("<b>Upcoming</b>"))
        self.agenda_list = QListWidget()
        self.agenda_list.itemChanged.connect(self._emit_done_toggle)
        self.agenda_list.currentItemChanged.connect(self._sync_task_button)
        layout.addWidget(self.agenda_list, stretch=1)

        task_row = QHBoxLayout()
        add_task_button = QPushButton("Add task")
        add_task_button.clicked.connect(self.task_requested)
        task_row.addWidget(add_task_button)
        self.delete_task_button = QPushButton("Delete task")
        self.delete_task_button.setEnabled(False)
        self.delete_task_button.clicked.connect(self._emit_task_delete)
        task_row.addWidget(self.delete_task_button)
        layout.addLayout(task_row)

        filter_row = QHBoxLayout()
        self.type_box = QComboBox()
        self.type_box.addItems(PRESET_TYPES)
        filter_row.addWidget(self.type_box, stretch=1)
        toggle_button = QPushButton("Show/hide")
        toggle_button.clicked.connect(lambda: self.type_toggled.emit(self.type_box.currentText()))
        filter_row.addWidget(toggle_button)
        self.remove_type_button = QPushButton("Remove")
        self.remove_type_button.clicked.connect(lambda: self.type_removed.emit(self.type_box.currentText()))
        filter_row.addWidget(self.remove_type_button)
        layout.addLayout(filter_row)

        custom_row = QHBoxLayout()
        self.custom_type_input = QLineEdit()
        self.custom_type_input.setPlaceholderText("Custom type, e.g. reading")
        self.custom_type_input.returnPressed.connect(self._emit_type_added)
        custom_row.addWidget(self.custom_type_input, stretch=1)
        add_type_button = QPushButton("Add type")
        add_type_button.clicked.connect(self._emit_type_added)
        custom_row.addWidget(add_type_button)
        layout.addLayout(custom_row)

        self.types_label = QLabel("")
        self.types_label.setWordWrap(True)
        layout.addWidget(self.types_label)

        rules_button = QPushButton("Color rules")
        rules_button.clicked.connect(self.color_rules_requested)
        layout.addWidget(rules_button)

        self.type_box.currentTextChanged.connect(self._sync_remove_button)
        self._sync_remove_button(self.type_box.currentText())

    def set_items(
        self, items: Iterable[AgendaItem], enabled_types: Iterable[str], custom_types: Iterable[str] = ()
    ) -> None:
        self.agenda_list.blockSignals(True)
        self.agenda_list.clear()
        self._task_ids = set()
        for agenda_item in items:
            start = agenda_item.task.due if agenda_item.is_task else agenda_item.event.start
            when = start.strftime("%a %d %H:%M" if agenda_item.has_time else "%a %d")
            label = f"{when}  {agenda_item.summary}  ({agenda_item.item_type})"
            item = QListWidgetItem(f"{label}  [task]" if agenda_item.is_task else label)
            item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
            item.setCheckState(Qt.CheckState.Checked if agenda_item.done else Qt.CheckState.Unchecked)
            item.setData(Qt.ItemDataRole.UserRole, agenda_item.item_id)
            if agenda_item.is_task:
                self._task_ids.add(agenda_item.item_id)
            self.agenda_list.addItem(item)
        self.agenda_list.blockSignals(False)
        self.delete_task_button.setEnabled(False)

        current = self.type_box.currentText()
        self.type_box.blockSignals(True)
        self.type_box.clear()
        self.type_box.addItems(list(PRESET_TYPES) + list(custom_types))
        if self.type_box.findText(current) >= 0:
            self.type_box.setCurrentText(current)
        self.type_box.blockSignals(False)
        self._sync_remove_button(self.type_box.currentText())
        self.types_label.setText("Showing: " + ", ".join(enabled_types))

    def _emit_done_toggle(self, item: QListWidgetItem) -> None:
        self.done_toggled.emit(item.data(Qt.ItemDataRole.UserRole))

    def _emit_type_added(self) -> None:
        text = self.custom_type_input.text().strip()
        if text:
            self.custom_type_input.clear()
            self.type_added.emit(text)

    def _emit_task_delete(self) -> None:
        item = self.agenda_list.currentItem()
        if item is not None and item.data(Qt.ItemDataRole.UserRole) in self._task_ids:
            self.task_deleted.emit(item.data(Qt.ItemDataRole.UserRole))

    def _sync_task_button(self, current, previous) -> None:
        self.delete_task_button.setEnabled(
            current is not None and current.data(Qt.ItemDataRole.UserRole) in self._task_ids
        )

    def _sync_remove_button(self, text: str) -> None:
        # preset types can be hidden but not removed
        self.remove_type_button.setEnabled(bool(text) and text not in PRESET_TYPES)
