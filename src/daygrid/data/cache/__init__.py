"""In-memory caches for fetched calendar data."""

from __future__ import annotations

from .timeline_cache import TimelineCache

__all__ = ["TimelineCache"]
