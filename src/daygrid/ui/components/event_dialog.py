from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Dict, Optional

from PyQt6.QtCore import QDateTime
from PyQt6.QtWidgets import (
    QDateTimeEdit,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLineEdit,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
)


class EventDialog(QDialog):
    """Title and notes for a new event, or edit/delete for an existing one."""

    def __init__(
        self,
        *,
        default_start: datetime,
        default_end: datetime,
        tz: Optional[tzinfo] = None,
        summary: str = "",
        description: str = "",
        allow_delete: bool = False,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self.tz = tz or default_start.tzinfo
        self.delete_requested = False
        self.setWindowTitle("Edit event" if allow_delete else "New event")
        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.summary_input = QLineEdit(summary)
        self.summary_input.setPlaceholderText("Title")
        form.addRow("Title", self.summary_input)

        self.start_input = QDateTimeEdit()
        self.start_input.setCalendarPopup(True)
        self.start_input.setDateTime(QDateTime(default_start.replace(tzinfo=None)))
        form.addRow("Start", self.start_input)

        self.end_input = QDateTimeEdit()
        self.end_input.setCalendarPopup(True)
        self.end_input.setDateTime(QDateTime(default_end.replace(tzinfo=None)))
        form.addRow("End", self.end_input)

        self.description_input = QTextEdit()
        self.description_input.setPlainText(description)
        self.description_input.setPlaceholderText("Notes, e.g. [TYPE: homework]")
        form.addRow("Notes", self.description_input)

        layout.addLayout(form)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        if allow_delete:
            delete_button = QPushButton("Delete")
            buttons.addButton(delete_button, QDialogButtonBox.ButtonRole.DestructiveRole)
            delete_button.clicked.connect(self._request_delete)
        layout.addWidget(buttons)

    def _request_delete(self) -> None:
        self.delete_requested = True
        self.accept()

    def values(self) -> Dict[str, Any]:
        start = self.start_input.dateTime().toPyDateTime().replace(tzinfo=self.tz)
        end = self.end_input.dateTime().toPyDateTime().replace(tzinfo=self.tz)
        return {
            "summary": self.summary_input.text().strip(),
            "description": self.description_input.toPlainText().strip(),
            "start": start,
            "end": end,
        }
