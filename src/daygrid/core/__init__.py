"""Qt-free calendar engine: time math, colors, layout, gestures, undo, preferences."""

from .config import APP_NAME, DATA_DIR, PREFERENCES_FILE, ensure_data_dir
from .gestures import (
    CreateIntent,
    DragRescheduleController,
    DragSelectionController,
    DropTarget,
    RescheduleIntent,
    active_mode,
)
from .layout import EventBox, layout, position_boxes
from .preferences import JsonPreferenceStore, MemoryPreferenceStore, PreferenceStore
from .undo import EventSink, EventStore, UndoStack, execute_undo

__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "PREFERENCES_FILE",
    "CreateIntent",
    "DragRescheduleController",
    "DragSelectionController",
    "DropTarget",
    "EventBox",
    "EventSink",
    "EventStore",
    "JsonPreferenceStore",
    "MemoryPreferenceStore",
    "PreferenceStore",
    "RescheduleIntent",
    "UndoStack",
    "active_mode",
    "ensure_data_dir",
    "execute_undo",
    "layout",
    "position_boxes",
]
