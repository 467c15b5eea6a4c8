"""Configuration models and helpers."""

from __future__ import annotations

from .settings import AppSettings, GridSettings, LlmSettings, StorageSettings, SupabaseSettings, UiSettings, get_settings
from .theme import AppPalette

__all__ = [
    "AppSettings",
    "AppPalette",
    "GridSettings",
    "LlmSettings",
    "StorageSettings",
    "SupabaseSettings",
    "UiSettings",
    "get_settings",
]
