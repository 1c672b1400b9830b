from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from ..data import EventStore
from ..domain import (
    AlertOption,
    CalendarEvent,
    CalendarPermissionDeniedError,
    DayRange,
    RepeatFrequency,
    TravelTimeOption,
)
from ..intent import EMPTY_SUMMARY, render_context_summary
from ..intent.timeparse import now as local_now

logger = logging.getLogger(__name__)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class CalendarService:
    """Owns today's event snapshot and its context summary.

    The snapshot is only ever replaced with what the store returned, never
    patched speculatively. Failures leave it at its last known good value and
    are exposed through ``access_denied`` and ``error_message``.
    """

    def __init__(
        self,
        store: EventStore,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        default_title: str = "New Event",
    ) -> None:
        self.store = store
        self.clock = clock or local_now
        self.default_title = default_title
        self.events: List[CalendarEvent] = []
        self.context_summary: str = EMPTY_SUMMARY
        self.is_loading = False
        self.loaded = False
        self.access_denied = False
        self.error_message: Optional[str] = None

    def today(self) -> DayRange:
        return DayRange.containing(self.clock())

    def replace_snapshot(self, events: Sequence[CalendarEvent], summary: Optional[str] = None) -> None:
        self.events = sorted(events, key=lambda event: event.starts_at)
        self.context_summary = summary if summary is not None else render_context_summary(self.events)
        self.loaded = True

    async def load_today_events(self) -> bool:
        """Fetch today's events; returns ``False`` when nothing was loaded."""

        if self.is_loading:
            logger.debug("Load already in progress; ignoring request.")
            return False
        self.is_loading = True
        self.access_denied = False
        self.error_message = None
        try:
            granted = await self.store.check_or_request_permission()
            if not granted:
                self.access_denied = True
                return False
            self.replace_snapshot(await self.store.list_events(self.today()))
            logger.info("Loaded %d event(s) for today", len(self.events))
            return True
        except CalendarPermissionDeniedError:
            self.access_denied = True
            return False
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not load today's events: %s", exc)
            self.error_message = str(exc)
            return False
        finally:
            self.is_loading = False

    async def create_event(
        self,
        title: str,
        starts_at: datetime,
        duration_minutes: float,
        *,
        location: Optional[str] = None,
        url: Optional[str] = None,
        notes: Optional[str] = None,
        is_all_day: bool = False,
        alert: AlertOption = AlertOption.NONE,
        repeat_rule: RepeatFrequency = RepeatFrequency.NONE,
        travel_time: TravelTimeOption = TravelTimeOption.NONE,
    ) -> Optional[CalendarEvent]:
        """Create an event from explicit fields, as the quick-create form does."""

        self.error_message = None
        try:
            event = CalendarEvent(
                title=_blank_to_none(title) or self.default_title,
                starts_at=starts_at,
                ends_at=starts_at + timedelta(minutes=duration_minutes),
                location=_blank_to_none(location),
                url=_blank_to_none(url),
                notes=_blank_to_none(notes),
                is_all_day=is_all_day,
                alert=alert,
                repeat_rule=repeat_rule,
                travel_time=travel_time,
            )
            created = await self.store.create(event)
            self.replace_snapshot(await self.store.list_events(self.today()))
        except CalendarPermissionDeniedError as exc:
            self.access_denied = True
            self.error_message = str(exc)
            return None
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not create event %r: %s", title, exc)
            self.error_message = str(exc)
            return None
        return created
