from __future__ import annotations

from typing import Optional


class CalendarError(RuntimeError):
    """Base class for failures raised by event stores."""


class CalendarPermissionDeniedError(CalendarError):
    """Raised when access to the calendar has not been granted."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or "Calendar access is needed to manage events. Please enable it and try again."
        )


class EventNotFoundError(CalendarError):
    """Raised when a mutation targets events the store no longer has."""

    def __init__(self, *event_ids: str) -> None:
        super().__init__(f"Event(s) no longer exist: {', '.join(event_ids)}")
        self.event_ids = tuple(event_ids)


class TransientStoreError(CalendarError):
    """Raised for backend failures while listing or mutating events."""
