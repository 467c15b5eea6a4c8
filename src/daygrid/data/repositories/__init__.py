"""Supabase repositories for first-class domain objects."""

from __future__ import annotations

from .events import EventNotFoundError, EventRepository

__all__ = ["EventNotFoundError", "EventRepository"]
