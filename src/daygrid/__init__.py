"""Daygrid: a day/week calendar grid with drag gestures and undo."""

from __future__ import annotations

__all__ = ["main"]


def main() -> None:
    from .ui.app import run_gui

    run_gui()
