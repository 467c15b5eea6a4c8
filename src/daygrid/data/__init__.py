"""Event storage: remote gateway, repositories and the in-memory window cache."""

from __future__ import annotations

from .cache import TimelineCache
from .supabase import StoreNotConfiguredError, SupabaseGateway

__all__ = ["StoreNotConfiguredError", "SupabaseGateway", "TimelineCache"]
