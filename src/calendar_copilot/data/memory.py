from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Dict, List, Sequence

from ..domain import (
    CalendarEvent,
    CalendarPermissionDeniedError,
    DayRange,
    EventNotFoundError,
)
from .base import sort_events


@dataclass
class InMemoryEventStore:
    """Process-local event store, used for demos and tests."""

    permission_granted: bool = True
    events_by_id: Dict[str, CalendarEvent] = field(default_factory=dict)
    _counter: int = 0

    def _ensure_access(self) -> None:
        if not self.permission_granted:
            raise CalendarPermissionDeniedError()

    def _next_id(self) -> str:
        self._counter += 1
        return f"mem-{self._counter:04d}"

    def seed(self, events: Sequence[CalendarEvent]) -> List[CalendarEvent]:
        """Insert events directly, bypassing the permission check."""

        seeded = []
        for event in events:
            stored = replace(event, external_id=event.external_id or self._next_id())
            self.events_by_id[stored.external_id] = stored
            seeded.append(replace(stored))
        return seeded

    async def check_or_request_permission(self) -> bool:
        return self.permission_granted

    async def list_events(self, day: DayRange) -> List[CalendarEvent]:
        self._ensure_access()
        return sort_events(replace(event) for event in self.events_by_id.values() if day.overlaps(event))

    async def create(self, event: CalendarEvent) -> CalendarEvent:
        self._ensure_access()
        stored = replace(event, external_id=self._next_id())
        self.events_by_id[stored.external_id] = stored
        return replace(stored)

    async def update(
        self,
        event_id: str,
        *,
        title: str,
        starts_at: datetime,
        duration: timedelta,
    ) -> CalendarEvent:
        self._ensure_access()
        existing = self.events_by_id.get(event_id)
        if existing is None:
            raise EventNotFoundError(event_id)
        updated = replace(existing, title=title, starts_at=starts_at, ends_at=starts_at + duration)
        self.events_by_id[event_id] = updated
        return replace(updated)

    async def delete_many(self, event_ids: Sequence[str]) -> None:
        self._ensure_access()
        missing = [event_id for event_id in event_ids if event_id not in self.events_by_id]
        for event_id in event_ids:
            self.events_by_id.pop(event_id, None)
        if missing:
            raise EventNotFoundError(*missing)
