from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

import orjson

from .config import PREFERENCES_FILE, ensure_data_dir

logger = logging.getLogger(__name__)


class PreferenceStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryPreferenceStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonPreferenceStore:
    """String key-value preferences persisted as a single JSON object on disk."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or PREFERENCES_FILE
        self._state: Optional[Dict[str, str]] = None

    def _ensure_materialized(self) -> Dict[str, str]:
        if self._state is not None:
            return self._state
        if not self._path.exists():
            self._state = {}
            return self._state
        raw = self._path.read_bytes()
        try:
            loaded = orjson.loads(raw) if raw else {}
        except orjson.JSONDecodeError:
            logger.warning("Preferences file %s is corrupt; starting empty", self._path)
            loaded = {}
        if not isinstance(loaded, dict):
            loaded = {}
        self._state = {str(key): str(value) for key, value in loaded.items()}
        return self._state

    def persist(self) -> None:
        if self._state is None:
            return
        if self._path == PREFERENCES_FILE:
            ensure_data_dir()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(self._state, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)
        self._path.write_bytes(payload + b"\n")

    def get(self, key: str) -> Optional[str]:
        return self._ensure_materialized().get(key)

    def set(self, key: str, value: str) -> None:
        self._ensure_materialized()[key] = value
        self.persist()

    def remove(self, key: str) -> None:
        state = self._ensure_materialized()
        if key in state:
            del state[key]
            self.persist()
