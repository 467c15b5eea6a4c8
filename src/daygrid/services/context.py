from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..config import AppSettings, get_settings
from ..core import JsonPreferenceStore, PreferenceStore, UndoStack
from ..data import SupabaseGateway, TimelineCache
from ..data.repositories import EventRepository


@dataclass(slots=True)
class ServiceContext:
    """One view session's shared settings, store, caches and undo history."""

    settings: AppSettings = field(default_factory=get_settings)
    preferences: PreferenceStore = field(default_factory=JsonPreferenceStore)
    events: Optional[EventRepository] = None
    gateway: SupabaseGateway = field(init=False)
    cache: TimelineCache = field(init=False)
    undo: UndoStack = field(init=False)

    def __post_init__(self) -> None:
        self.gateway = SupabaseGateway(self.settings.supabase)
        self.cache = TimelineCache(tz=self.settings.ui.tz)
        self.undo = UndoStack(limit=self.settings.grid.undo_limit)
        if self.events is None:
            self.events = EventRepository(
                gateway=self.gateway,
                table_name=self.settings.storage.events_table,
            )
