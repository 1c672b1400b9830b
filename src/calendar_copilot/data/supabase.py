from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from supabase import Client, create_client

from ..config.settings import SupabaseSettings
from ..domain import CalendarPermissionDeniedError


class SupabaseNotConfiguredError(CalendarPermissionDeniedError):
    """Raised when accessing Supabase without a URL or anon key."""

    def __init__(self) -> None:
        super().__init__("Supabase settings are missing URL or anon key.")


@dataclass
class SupabaseGateway:
    """Thin wrapper around the Supabase Python client."""

    settings: SupabaseSettings
    _client: Optional[Client] = None

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    def ensure_client(self) -> Client:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            raise SupabaseNotConfiguredError()
        self._client = create_client(self.settings.url, self.settings.anon_key)
        return self._client

    def table(self, name: str):
        return self.ensure_client().table(name)
