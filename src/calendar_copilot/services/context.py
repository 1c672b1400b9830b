from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..config import AppSettings, get_settings
from ..data import (
    EventStore,
    InMemoryEventStore,
    JsonEventStore,
    SupabaseEventRepository,
    SupabaseGateway,
)
from ..intent.timeparse import now
from ..orchestrator import (
    CompletionClient,
    ConversationalFallback,
    DiagnosticSink,
    FanOutDiagnosticSink,
    IntentReconciler,
    JsonlDiagnosticSink,
    LoggingDiagnosticSink,
    OpenAICompletionClient,
)
from .calendar import CalendarService
from .chat import ChatSession

logger = logging.getLogger(__name__)


def build_event_store(settings: AppSettings) -> EventStore:
    backend = settings.store.backend
    if backend == "memory":
        return InMemoryEventStore()
    if backend == "supabase":
        return SupabaseEventRepository(
            gateway=SupabaseGateway(settings.supabase),
            table_name=settings.supabase.events_table,
            user_id=settings.supabase.user_id,
        )
    if backend != "json":
        logger.warning("Unknown CALENDAR_STORE %r; using the JSON store.", backend)
    return JsonEventStore(settings.store.json_path)


def build_diagnostics(settings: AppSettings) -> DiagnosticSink:
    sinks: list[DiagnosticSink] = [LoggingDiagnosticSink()]
    if settings.assistant.diagnostics_path:
        sinks.append(JsonlDiagnosticSink(settings.assistant.diagnostics_path))
    return sinks[0] if len(sinks) == 1 else FanOutDiagnosticSink(sinks)


@dataclass
class ServiceContext:
    """Aggregate root wiring settings, the event store and the model client."""

    settings: AppSettings = field(default_factory=get_settings)
    store: Optional[EventStore] = None
    completion: Optional[CompletionClient] = None
    diagnostics: Optional[DiagnosticSink] = None
    fallback: ConversationalFallback = field(init=False)

    def __post_init__(self) -> None:
        assistant = self.settings.assistant
        if self.store is None:
            self.store = build_event_store(self.settings)
        if self.completion is None:
            self.completion = OpenAICompletionClient(self.settings.llm)
        if self.diagnostics is None:
            self.diagnostics = build_diagnostics(self.settings)
        self.fallback = ConversationalFallback(self.completion, history_limit=assistant.history_limit)

    def clock(self) -> datetime:
        return now(self.settings.assistant.timezone)

    def build_reconciler(self) -> IntentReconciler:
        assistant = self.settings.assistant
        return IntentReconciler(
            self.store,
            self.completion,
            self.fallback,
            diagnostics=self.diagnostics,
            default_duration_minutes=assistant.default_duration_minutes,
            default_title=assistant.default_title,
        )

    def build_session(self) -> ChatSession:
        calendar = CalendarService(
            self.store,
            clock=self.clock,
            default_title=self.settings.assistant.default_title,
        )
        return ChatSession(calendar, self.build_reconciler())
