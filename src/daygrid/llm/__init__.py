"""Natural-language command planning."""

from __future__ import annotations

from .models import CommandPlan, EventReference, EventTime, EventUpdate, PlannedEvent
from .planner import CommandImage, CommandPlanner, CommandPlannerError

__all__ = [
    "CommandImage",
    "CommandPlan",
    "CommandPlanner",
    "CommandPlannerError",
    "EventReference",
    "EventTime",
    "EventUpdate",
    "PlannedEvent",
]
