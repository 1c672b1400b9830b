"""Application services: calendar snapshot, chat session, HTTP surface."""

from __future__ import annotations

from .calendar import CalendarService
from .chat import ChatSession
from .context import ServiceContext, build_event_store

__all__ = ["CalendarService", "ChatSession", "ServiceContext", "build_event_store"]
