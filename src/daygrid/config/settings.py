from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from ..core.time_math import timezone_from_offset

load_dotenv()


@dataclass(frozen=True)
class LlmSettings:
    api_key: Optional[str]
    model: str
    base_url: Optional[str]
    organization: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.model)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.api_key:
            missing.append("OPENAI_API_KEY")
        if not self.model:
            missing.append("OPENAI_MODEL")
        return missing


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str]
    anon_key: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


@dataclass(frozen=True)
class UiSettings:
    app_name: str
    organization: str
    timezone_offset: str
    week_hour_height: int
    day_hour_height: int

    @property
    def tz(self) -> tzinfo:
        return timezone_from_offset(self.timezone_offset)


@dataclass(frozen=True)
class GridSettings:
    create_snap_minutes: int
    reschedule_snap_minutes: int
    min_create_minutes: int
    undo_limit: int
    week_min_visual_minutes: int
    day_min_visual_minutes: int


@dataclass(frozen=True)
class StorageSettings:
    events_table: str
    fetch_window_days: int


@dataclass(frozen=True)
class AppSettings:
    llm: LlmSettings
    supabase: SupabaseSettings
    ui: UiSettings
    grid: GridSettings
    storage: StorageSettings


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    llm = LlmSettings(
        api_key=os.getenv("OPENAI_API_KEY"),
        model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        base_url=os.getenv("OPENAI_BASE_URL"),
        organization=os.getenv("OPENAI_ORG"),
    )

    supabase = SupabaseSettings(
        url=os.getenv("SUPABASE_URL"),
        anon_key=os.getenv("SUPABASE_ANON_KEY"),
    )

    ui = UiSettings(
        app_name=os.getenv("DAYGRID_APP_NAME", "Daygrid"),
        organization=os.getenv("DAYGRID_APP_ORG", "Daygrid"),
        timezone_offset=os.getenv("DAYGRID_TIMEZONE_OFFSET", "+00:00"),
        week_hour_height=_int_from_env("DAYGRID_WEEK_HOUR_HEIGHT", 48),
        day_hour_height=_int_from_env("DAYGRID_DAY_HOUR_HEIGHT", 60),
    )

    grid = GridSettings(
        create_snap_minutes=_int_from_env("DAYGRID_CREATE_SNAP_MINUTES", 15),
        reschedule_snap_minutes=_int_from_env("DAYGRID_RESCHEDULE_SNAP_MINUTES", 5),
        min_create_minutes=_int_from_env("DAYGRID_MIN_CREATE_MINUTES", 15),
        undo_limit=_int_from_env("DAYGRID_UNDO_LIMIT", 10),
        week_min_visual_minutes=20,
        day_min_visual_minutes=30,
    )

    storage = StorageSettings(
        events_table=os.getenv("SUPABASE_EVENTS_TABLE", "calendar_events"),
        fetch_window_days=_int_from_env("DAYGRID_FETCH_WINDOW_DAYS", 62),
    )

    return AppSettings(llm=llm, supabase=supabase, ui=ui, grid=grid, storage=storage)
