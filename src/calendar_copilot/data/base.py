from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Protocol, Sequence, runtime_checkable

from ..domain import CalendarEvent, DayRange


@runtime_checkable
class EventStore(Protocol):
    """CRUD surface over a calendar backend.

    Implementations raise :class:`~calendar_copilot.domain.CalendarPermissionDeniedError`,
    :class:`~calendar_copilot.domain.EventNotFoundError` or
    :class:`~calendar_copilot.domain.TransientStoreError`; they never swallow failures.
    ``delete_many`` removes every identifier it still knows about before raising
    ``EventNotFoundError`` for the ones that were already gone.
    """

    async def check_or_request_permission(self) -> bool: ...

    async def list_events(self, day: DayRange) -> List[CalendarEvent]: ...

    async def create(self, event: CalendarEvent) -> CalendarEvent: ...

    async def update(
        self,
        event_id: str,
        *,
        title: str,
        starts_at: datetime,
        duration: timedelta,
    ) -> CalendarEvent: ...

    async def delete_many(self, event_ids: Sequence[str]) -> None: ...


def sort_events(events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    return sorted(events, key=lambda event: event.starts_at)
