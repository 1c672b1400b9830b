from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar
from uuid import uuid4

from ...domain import (
    CalendarError,
    CalendarEvent,
    DayRange,
    EventNotFoundError,
    TransientStoreError,
)
from ..base import sort_events
from ..supabase import SupabaseGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class SupabaseEventRepository:
    """Event store backed by a Supabase table.

    The Supabase client is synchronous, so every call runs in a worker thread.
    Rows carry the columns of :meth:`CalendarEvent.to_record` plus an optional
    ``user_id`` used to scope queries.
    """

    gateway: SupabaseGateway
    table_name: str
    user_id: Optional[str] = None

    async def _run(self, operation: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(operation)
        except CalendarError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.warning("Supabase call on %s failed: %s", self.table_name, exc)
            raise TransientStoreError(str(exc)) from exc

    def _scoped(self, query):
        return query.eq("user_id", self.user_id) if self.user_id else query

    def _to_event(self, record: Dict[str, Any]) -> CalendarEvent:
        return CalendarEvent.from_record(record)

    async def check_or_request_permission(self) -> bool:
        if not self.gateway.is_configured:
            return False
        await self._run(self.gateway.ensure_client)
        return True

    async def list_events(self, day: DayRange) -> List[CalendarEvent]:
        def _fetch() -> List[CalendarEvent]:
            query = (
                self.gateway.table(self.table_name)
                .select("*")
                .lt("starts_at", day.end.isoformat())
                .gt("ends_at", day.start.isoformat())
                .order("starts_at", desc=False)
            )
            response = self._scoped(query).execute()
            return [self._to_event(record) for record in response.data or []]

        return sort_events(await self._run(_fetch))

    async def create(self, event: CalendarEvent) -> CalendarEvent:
        payload = event.to_record()
        payload["id"] = str(uuid4())
        if self.user_id:
            payload["user_id"] = self.user_id

        def _insert() -> CalendarEvent:
            response = self.gateway.table(self.table_name).insert(payload).execute()
            rows = response.data or [payload]
            return self._to_event(rows[0])

        return await self._run(_insert)

    async def update(
        self,
        event_id: str,
        *,
        title: str,
        starts_at: datetime,
        duration: timedelta,
    ) -> CalendarEvent:
        changes = {
            "title": title,
            "starts_at": starts_at.isoformat(),
            "ends_at": (starts_at + duration).isoformat(),
        }

        def _update() -> CalendarEvent:
            query = self.gateway.table(self.table_name).update(changes).eq("id", event_id)
            response = self._scoped(query).execute()
            if not response.data:
                raise EventNotFoundError(event_id)
            return self._to_event(response.data[0])

        return await self._run(_update)

    async def delete_many(self, event_ids: Sequence[str]) -> None:
        identifiers = list(event_ids)

        def _delete() -> List[str]:
            query = self.gateway.table(self.table_name).delete().in_("id", identifiers)
            response = self._scoped(query).execute()
            deleted = {str(record.get("id")) for record in response.data or []}
            return [event_id for event_id in identifiers if event_id not in deleted]

        missing = await self._run(_delete)
        if missing:
            raise EventNotFoundError(*missing)
