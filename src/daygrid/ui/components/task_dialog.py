from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Dict, Iterable, Optional

from PyQt6.QtCore import QDateTime
from PyQt6.QtWidgets import (
    QComboBox,
    QDateTimeEdit,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLineEdit,
    QVBoxLayout,
)


class TaskDialog(QDialog):
    """Free-text agenda task with a due time and a type."""

    def __init__(self, *, default_due: datetime, types: Iterable[str], tz: Optional[tzinfo] = None, parent=None) -> None:
        super().__init__(parent)
        self.tz = tz or default_due.tzinfo
        self.setWindowTitle("New task")
        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.summary_input = QLineEdit()
        self.summary_input.setPlaceholderText("e.g. Read chapter 4")
        form.addRow("Task", self.summary_input)

        self.due_input = QDateTimeEdit()
        self.due_input.setCalendarPopup(True)
        self.due_input.setDateTime(QDateTime(default_due.replace(tzinfo=None)))
        form.addRow("Due", self.due_input)

        self.type_input = QComboBox()
        self.type_input.addItems(list(types))
        form.addRow("Type", self.type_input)

        layout.addLayout(form)
        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def values(self) -> Dict[str, Any]:
        return {
            "summary": self.summary_input.text().strip(),
            "due": self.due_input.dateTime().toPyDateTime().replace(tzinfo=self.tz),
            "item_type": self.type_input.currentText(),
        }
