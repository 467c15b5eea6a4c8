"""Application services orchestrating data access and domain logic."""

from __future__ import annotations

from .agenda import AgendaItem, AgendaService, CustomTask
from .calendar import CalendarService, CalendarServiceError, MutationResult
from .color_rules import ColorRuleService
from .commands import CommandService, PendingCommand
from .context import ServiceContext

__all__ = [
    "AgendaItem",
    "AgendaService",
    "CalendarService",
    "CalendarServiceError",
    "ColorRuleService",
    "CustomTask",
    "CommandService",
    "MutationResult",
    "PendingCommand",
    "ServiceContext",
]
