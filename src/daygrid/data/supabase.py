from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from supabase import Client, create_client

from ..config.settings import SupabaseSettings

logger = logging.getLogger(__name__)


class StoreNotConfiguredError(RuntimeError):
    """Raised when the events database is used without a URL and key."""


@dataclass
class SupabaseGateway:
    """Connects to the events database on first use and hands out table builders."""

    settings: SupabaseSettings
    client_factory: Callable[[str, str], Client] = field(default=create_client, repr=False)
    _client: Optional[Client] = field(default=None, repr=False)

    @property
    def connected(self) -> bool:
        return self._client is not None

    def connect(self) -> Client:
        if self._client is None:
            if not self.settings.is_configured:
                raise StoreNotConfiguredError("Set SUPABASE_URL and SUPABASE_ANON_KEY to load the calendar.")
            logger.info("Connecting to event store at %s", self.settings.url)
            self._client = self.client_factory(self.settings.url, self.settings.anon_key)
        return self._client

    def table(self, name: str):
        return self.connect().table(name)
