from __future__ import annotations

import html
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import QBuffer, QIODevice, pyqtSignal
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from ...llm import CommandImage
from ...services import CommandService, MutationResult, PendingCommand
from ...utils.qt import TaskRunner


class CommandPanel(QWidget):
    """Free-text calendar commands; changes wait for an explicit confirm.

    Planning runs on ``planning_runner`` so a slow model reply never holds up
    store calls; confirmed changes go through ``runner`` with the other mutations.
    """

    calendar_changed = pyqtSignal()

    def __init__(
        self,
        *,
        service: Optional[CommandService],
        runner: TaskRunner,
        planning_runner: Optional[TaskRunner] = None,
    ) -> None:
        super().__init__()
        self.setObjectName("commandPanel")
        self.service = service
        self.runner = runner
        self.planning_runner = planning_runner or runner
        self.pending: Optional[PendingCommand] = None
        self.image: Optional[CommandImage] = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        self.transcript = QTextEdit()
        self.transcript.setObjectName("commandTranscript")
        self.transcript.setReadOnly(True)
        self.transcript.setPlaceholderText("Try \"add a study session tomorrow at 3pm\" or \"what's on Friday?\"")
        layout.addWidget(self.transcript)

        confirm_row = QHBoxLayout()
        self.confirm_button = QPushButton("Confirm")
        self.confirm_button.setObjectName("primaryButton")
        self.confirm_button.clicked.connect(self._confirm)
        confirm_row.addWidget(self.confirm_button)
        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.clicked.connect(self._cancel)
        confirm_row.addWidget(self.cancel_button)
        layout.addLayout(confirm_row)

        image_row = QHBoxLayout()
        self.attach_button = QPushButton("Attach image")
        self.attach_button.clicked.connect(self._attach_image)
        image_row.addWidget(self.attach_button)
        self.paste_button = QPushButton("Paste image")
        self.paste_button.clicked.connect(self._paste_image)
        image_row.addWidget(self.paste_button)
        self.image_label = QLabel("")
        image_row.addWidget(self.image_label, stretch=1)
        self.clear_image_button = QPushButton("x")
        self.clear_image_button.clicked.connect(lambda: self._set_image(None, ""))
        image_row.addWidget(self.clear_image_button)
        layout.addLayout(image_row)

        input_row = QHBoxLayout()
        self.input_line = QLineEdit()
        self.input_line.setPlaceholderText("Ask or tell the calendar something")
        self.input_line.returnPressed.connect(self._send)
        input_row.addWidget(self.input_line)

        send_button = QPushButton("Send")
        send_button.clicked.connect(self._send)
        input_row.addWidget(send_button)
        layout.addLayout(input_row)

        self._set_pending(None)
        self._set_image(None, "")
        if service is None:
            self.input_line.setEnabled(False)
            self.attach_button.setEnabled(False)
            self.paste_button.setEnabled(False)
            self.append_message("assistant", "Set OPENAI_API_KEY to enable calendar commands.")

    def append_message(self, role: str, content: str) -> None:
        prefix = "You" if role == "user" else "Assistant"
        body = html.escape(content).replace("\n", "<br>")
        self.transcript.append(f"<b>{prefix}:</b> {body}")

    def _set_pending(self, pending: Optional[PendingCommand]) -> None:
        self.pending = pending if pending is not None and pending.needs_confirmation else None
        self.confirm_button.setVisible(self.pending is not None)
        self.cancel_button.setVisible(self.pending is not None)

    def _set_image(self, image: Optional[CommandImage], label: str) -> None:
        self.image = image
        self.image_label.setText(label)
        self.clear_image_button.setVisible(image is not None)

    def _attach_image(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Choose image", "", "Images (*.png *.jpg *.jpeg *.gif *.webp)")
        if not path:
            return
        try:
            image = CommandImage.from_path(path)
        except (OSError, ValueError) as exc:
            self.append_message("assistant", f"Error: {exc}")
            return
        self._set_image(image, Path(path).name)

    def _paste_image(self) -> None:
        clipboard_image = QApplication.clipboard().image()
        if clipboard_image.isNull():
            self.append_message("assistant", "The clipboard has no image.")
            return
        buffer = QBuffer()
        buffer.open(QIODevice.OpenModeFlag.WriteOnly)
        clipboard_image.save(buffer, "PNG")
        self._set_image(CommandImage(data=bytes(buffer.data()), mime_type="image/png"), "Pasted image")

    def _send(self) -> None:
        message = self.input_line.text().strip()
        if (not message and self.image is None) or self.service is None:
            return
        image = self.image
        self.input_line.clear()
        self.append_message("user", f"{message} [image]".strip() if image is not None else message)
        self.input_line.setEnabled(False)
        self._set_pending(None)
        self._set_image(None, "")
        service = self.service

        def done(pending: PendingCommand) -> None:
            self.input_line.setEnabled(True)
            self.append_message("assistant", pending.message)
            self._set_pending(pending)

        self.planning_runner.submit(service.submit, message, image=image, on_success=done, on_error=self._fail)

    def _confirm(self) -> None:
        pending = self.pending
        if pending is None or self.service is None:
            return
        self._set_pending(None)
        self.input_line.setEnabled(False)

        def done(results: List[MutationResult]) -> None:
            self.input_line.setEnabled(True)
            for result in results:
                self.append_message("assistant", result.message)
            self.calendar_changed.emit()

        self.runner.submit(self.service.confirm, pending, on_success=done, on_error=self._fail)

    def _cancel(self) -> None:
        if self.pending is None or self.service is None:
            return
        self.append_message("assistant", self.service.cancel(self.pending))
        self._set_pending(None)

    def _fail(self, exc: Exception) -> None:
        self.input_line.setEnabled(True)
        self.append_message("assistant", f"Error: {exc}")
