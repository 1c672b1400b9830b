"""Shared fixtures and fakes for the calendar copilot tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Sequence, Tuple

import pytest

from calendar_copilot.data import InMemoryEventStore
from calendar_copilot.domain import CalendarEvent, DayRange, TransientStoreError
from calendar_copilot.orchestrator import (
    ConversationalFallback,
    Diagnostic,
    IntentReconciler,
)
from calendar_copilot.services import CalendarService, ChatSession

REFERENCE = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0) -> datetime:
    return REFERENCE.replace(hour=hour, minute=minute)


def make_event(title: str, hour: int, minute: int = 0, *, minutes: int = 30, **kwargs: Any) -> CalendarEvent:
    start = at(hour, minute)
    return CalendarEvent(title=title, starts_at=start, ends_at=start + timedelta(minutes=minutes), **kwargs)


class FakeCompletion:
    """Completion client that replays canned responses and records prompts."""

    def __init__(
        self,
        responses: Optional[Sequence[str]] = None,
        *,
        available: bool = True,
        error: Optional[Exception] = None,
    ) -> None:
        self.responses = list(responses or [])
        self.available = available
        self.error = error
        self.prompts: List[str] = []

    @property
    def is_available(self) -> bool:
        return self.available

    async def respond(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.responses.pop(0) if self.responses else ""


class RecordingSink:
    def __init__(self) -> None:
        self.diagnostics: List[Diagnostic] = []

    def emit(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    @property
    def events(self) -> List[str]:
        return [diagnostic.event for diagnostic in self.diagnostics]


@dataclass
class SpyStore(InMemoryEventStore):
    """In-memory store that records every call and can be told to fail."""

    calls: List[Tuple[str, Any]] = field(default_factory=list)
    fail_on: Optional[str] = None

    def _record(self, name: str, payload: Any) -> None:
        self.calls.append((name, payload))
        if self.fail_on == name:
            raise TransientStoreError(f"{name} exploded")

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    async def list_events(self, day: DayRange) -> List[CalendarEvent]:
        self._record("list_events", day)
        return await super().list_events(day)

    async def create(self, event: CalendarEvent) -> CalendarEvent:
        self._record("create", event)
        return await super().create(event)

    async def update(self, event_id, *, title, starts_at, duration) -> CalendarEvent:
        self._record("update", (event_id, title, starts_at, duration))
        return await super().update(event_id, title=title, starts_at=starts_at, duration=duration)

    async def delete_many(self, event_ids) -> None:
        self._record("delete_many", list(event_ids))
        return await super().delete_many(event_ids)


@pytest.fixture
def reference() -> datetime:
    return REFERENCE


@pytest.fixture
def store() -> SpyStore:
    return SpyStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


def build_reconciler(store, completion, sink=None, **kwargs: Any) -> IntentReconciler:
    fallback = ConversationalFallback(completion, history_limit=4)
    return IntentReconciler(store, completion, fallback, diagnostics=sink or RecordingSink(), **kwargs)


def build_session(store, completion, sink=None) -> ChatSession:
    calendar = CalendarService(store, clock=lambda: REFERENCE)
    return ChatSession(calendar, build_reconciler(store, completion, sink))
