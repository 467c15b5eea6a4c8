from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QHBoxLayout,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
)

from ...core.colors import is_too_light
from ...services import ColorRuleService


class ColorRulesDialog(QDialog):
    """Keyword to color rules, first match wins."""

    def __init__(self, *, service: ColorRuleService, parent=None) -> None:
        super().__init__(parent)
        self.service = service
        self.setWindowTitle("Color rules")
        self.resize(420, 460)
        layout = QVBoxLayout(self)

        self.rule_list = QListWidget()
        layout.addWidget(self.rule_list, stretch=1)

        form = QFormLayout()
        self.name_input = QLineEdit()
        form.addRow("Name", self.name_input)
        self.keywords_input = QLineEdit()
        self.keywords_input.setPlaceholderText("lecture, seminar, lab")
        form.addRow("Keywords", self.keywords_input)
        self.color_input = QLineEdit()
        self.color_input.setPlaceholderText("#3b82f6")
        form.addRow("Color", self.color_input)
        layout.addLayout(form)

        actions = QHBoxLayout()
        add_button = QPushButton("Add rule")
        add_button.setObjectName("primaryButton")
        add_button.clicked.connect(self._add)
        actions.addWidget(add_button)
        remove_button = QPushButton("Remove selected")
        remove_button.clicked.connect(self._remove)
        actions.addWidget(remove_button)
        reset_button = QPushButton("Reset to defaults")
        reset_button.clicked.connect(self._reset)
        actions.addWidget(reset_button)
        layout.addLayout(actions)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        buttons.rejected.connect(self.accept)
        layout.addWidget(buttons)

        self._reload()

    def _reload(self) -> None:
        self.rule_list.clear()
        for rule in self.service.load():
            item = QListWidgetItem(f"{rule.name}: {', '.join(rule.keywords)}")
            item.setData(Qt.ItemDataRole.UserRole, rule.id)
            item.setBackground(QColor(rule.color))
            item.setForeground(QColor("#000000" if is_too_light(QColor(rule.color).name()) else "#ffffff"))
            self.rule_list.addItem(item)

    def _add(self) -> None:
        name = self.name_input.text().strip()
        keywords = self.keywords_input.text().split(",")
        color = self.color_input.text().strip() or "#3b82f6"
        if not name or not QColor(color).isValid():
            QMessageBox.warning(self, "Invalid rule", "A rule needs a name and a valid color.")
            return
        self.service.add_rule(name, keywords, QColor(color).name())
        self.name_input.clear()
        self.keywords_input.clear()
        self.color_input.clear()
        self._reload()

    def _remove(self) -> None:
        item = self.rule_list.currentItem()
        if item is None:
            return
        self.service.remove_rule(item.data(Qt.ItemDataRole.UserRole))
        self._reload()

    def _reset(self) -> None:
        self.service.reset()
        self._reload()
