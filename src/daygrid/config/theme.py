from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AppPalette:
    background_primary: str = "#0b1120"
    background_secondary: str = "#111827"
    surface: str = "#131c2e"
    accent_primary: str = "#6366f1"
    text_primary: str = "#f8fafc"
    text_muted: str = "#94a3b8"
    grid_line: str = "#1f2a3d"
    today_tint: str = "#141c33"
    now_line: str = "#ef4444"
    border_strong: str = "#243657"

    def as_stylesheet(self) -> str:
        """Global stylesheet for the PyQt app."""

        return f"""
        QWidget {{
            background-color: {self.background_primary};
            color: {self.text_primary};
            font-family: 'Helvetica Neue', 'Segoe UI', Arial, sans-serif;
            font-size: 13px;
        }}
        QPushButton {{
            background-color: {self.surface};
            color: {self.text_primary};
            border: 1px solid {self.border_strong};
            padding: 6px 12px;
            border-radius: 6px;
            font-weight: 500;
        }}
        QPushButton:hover {{
            border-color: {self.accent_primary};
        }}
        QPushButton:disabled {{
            color: {self.text_muted};
        }}
        QPushButton#primaryButton {{
            background-color: {self.accent_primary};
            border: none;
            color: white;
        }}
        QLineEdit, QTextEdit, QDateTimeEdit {{
            background-color: {self.background_secondary};
            color: {self.text_primary};
            border: 1px solid {self.border_strong};
            border-radius: 6px;
            padding: 6px 8px;
        }}
        QLineEdit:focus, QTextEdit:focus, QDateTimeEdit:focus {{
            border-color: {self.accent_primary};
        }}
        QListWidget {{
            background-color: {self.background_secondary};
            border: 1px solid {self.border_strong};
        }}
        QLabel#rangeTitle {{
            font-size: 18px;
            font-weight: 700;
        }}
        QWidget#commandPanel {{
            background-color: {self.surface};
        }}
        QTextEdit#commandTranscript {{
            border-radius: 10px;
            padding: 8px;
        }}
        """
