"""Domain models for today's calendar."""

from __future__ import annotations

from .enums import AlertOption, MessageRole, RepeatFrequency, TravelTimeOption
from .errors import (
    CalendarError,
    CalendarPermissionDeniedError,
    EventNotFoundError,
    TransientStoreError,
)
from .models import CalendarEvent, ChatMessage, DayRange

__all__ = [
    "AlertOption",
    "CalendarError",
    "CalendarEvent",
    "CalendarPermissionDeniedError",
    "ChatMessage",
    "DayRange",
    "EventNotFoundError",
    "MessageRole",
    "RepeatFrequency",
    "TransientStoreError",
    "TravelTimeOption",
]
