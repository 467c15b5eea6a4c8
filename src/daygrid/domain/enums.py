from __future__ import annotations

from enum import Enum


class UndoKind(str, Enum):
    CREATE = "create"
    DELETE = "delete"
    EDIT = "edit"
    MOVE = "move"


class GestureMode(str, Enum):
    CREATING = "creating"
    RESCHEDULING = "rescheduling"


class CommandType(str, Enum):
    QUESTION = "question"
    CREATE = "create"
    DELETE = "delete"
    UPDATE = "update"


class ViewMode(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
