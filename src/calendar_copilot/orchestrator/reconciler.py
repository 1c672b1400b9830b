"""Interpret a chat turn as a calendar action and apply it to the event store.

A turn moves through ``AWAITING_INTENT`` (ask the completion model for intent
JSON), then one of ``CLARIFYING`` (surface the model's question),
``APPLYING`` (create/edit/delete against the store) or ``DELEGATING`` (plain
conversational reply), and back to ``IDLE``. Every branch ends in a reply;
store and model failures are turned into messages, never raised.

After any mutation the day's events are fetched again from the store rather
than patched locally, so identifiers and defaults assigned by the backend
show up in the snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..data import EventStore
from ..domain import (
    CalendarError,
    CalendarEvent,
    CalendarPermissionDeniedError,
    ChatMessage,
    DayRange,
    EventNotFoundError,
)
from ..intent import (
    CalendarIntent,
    EventSpec,
    IntentAction,
    match_event,
    parse_intent,
    render_context_summary,
    resolve,
    resolve_end,
)
from .completion import CompletionClient
from .diagnostics import Diagnostic, DiagnosticSink, LoggingDiagnosticSink
from .fallback import ConversationalFallback
from .prompts import build_intent_prompt

logger = logging.getLogger(__name__)

NO_EVENT_CREATED = "No event created."
NO_EVENTS_TO_UPDATE = "No matching events to update today."
NO_EVENTS_TO_DELETE = "No matching events to delete today."
NO_CALENDAR_ACTION = "No calendar action taken."


class TurnState(str, Enum):
    IDLE = "idle"
    AWAITING_INTENT = "awaiting_intent"
    CLARIFYING = "clarifying"
    APPLYING = "applying"
    DELEGATING = "delegating"


@dataclass
class TurnResult:
    reply: str
    state: TurnState
    action: Optional[IntentAction] = None
    affected: int = 0
    events: Optional[List[CalendarEvent]] = None
    summary: Optional[str] = None
    error: Optional[str] = None
    access_denied: bool = False

    @property
    def refreshed(self) -> bool:
        return self.events is not None


def _missing_note(missing: Sequence[str]) -> str:
    if not missing:
        return ""
    return f" {len(missing)} event(s) were no longer in your calendar."


class IntentReconciler:
    def __init__(
        self,
        store: EventStore,
        completion: CompletionClient,
        fallback: ConversationalFallback,
        *,
        diagnostics: Optional[DiagnosticSink] = None,
        default_duration_minutes: int = 60,
        default_title: str = "New Event",
    ) -> None:
        self.store = store
        self.completion = completion
        self.fallback = fallback
        self.diagnostics = diagnostics or LoggingDiagnosticSink()
        self.default_duration_minutes = default_duration_minutes
        self.default_title = default_title
        self.state = TurnState.IDLE

    # ------------------------------------------------------------------ public API

    async def handle(
        self,
        utterance: str,
        *,
        events: Sequence[CalendarEvent],
        summary: str,
        reference: datetime,
        history: Sequence[ChatMessage] = (),
    ) -> TurnResult:
        self.state = TurnState.AWAITING_INTENT
        try:
            intent = await self.interpret(utterance, summary, reference)
            if intent is None:
                return await self._delegate(utterance, summary, history, reason="no_intent")

            if intent.needs_clarification:
                self.state = TurnState.CLARIFYING
                self._emit("intent.clarification", action=intent.action.value)
                return TurnResult(
                    reply=intent.clarification.strip(),
                    state=TurnState.CLARIFYING,
                    action=intent.action,
                )

            if intent.action is IntentAction.UNKNOWN:
                self._emit("intent.unknown_action")
                return await self._delegate(utterance, summary, history, reason="unknown_action")

            self.state = TurnState.APPLYING
            return await self.apply(intent, events, reference)
        finally:
            self.state = TurnState.IDLE

    async def interpret(self, utterance: str, summary: str, reference: datetime) -> Optional[CalendarIntent]:
        """Ask the completion model for intent JSON; ``None`` means "not a calendar request"."""

        if not self.completion.is_available:
            self._emit("intent.unavailable")
            return None

        prompt = build_intent_prompt(
            utterance=utterance,
            summary=summary,
            today=reference.date().isoformat(),
            now=reference.strftime("%H:%M"),
        )
        try:
            raw = await self.completion.respond(prompt)
        except Exception as exc:  # noqa: BLE001
            self._emit("intent.request_failed", logging.WARNING, error=str(exc))
            return None

        intent = parse_intent(raw)
        if intent is None:
            self._emit("intent.unparsable", length=len(raw or ""))
        return intent

    async def apply(
        self,
        intent: CalendarIntent,
        events: Sequence[CalendarEvent],
        reference: datetime,
    ) -> TurnResult:
        handlers = {
            IntentAction.CREATE: self._apply_create,
            IntentAction.EDIT: self._apply_edit,
            IntentAction.DELETE: self._apply_delete,
        }
        handler = handlers.get(intent.action)
        if handler is None:
            return TurnResult(reply=NO_CALENDAR_ACTION, state=TurnState.APPLYING, action=intent.action)

        try:
            result = await handler(intent.event_specs, events, reference)
        except CalendarPermissionDeniedError as exc:
            self._emit("store.permission_denied", logging.WARNING, action=intent.action.value)
            return TurnResult(
                reply=str(exc),
                state=TurnState.APPLYING,
                action=intent.action,
                error=str(exc),
                access_denied=True,
            )
        except Exception as exc:  # noqa: BLE001
            self._emit("store.failure", logging.ERROR, action=intent.action.value, error=str(exc))
            message = f"Calendar update failed: {exc}"
            return TurnResult(reply=message, state=TurnState.APPLYING, action=intent.action, error=message)

        self._emit("turn.applied", action=intent.action.value, affected=result.affected)
        return result

    # ------------------------------------------------------------------ actions

    async def _apply_create(
        self,
        specs: Sequence[EventSpec],
        events: Sequence[CalendarEvent],
        reference: datetime,
    ) -> TurnResult:
        created = 0
        failure: Optional[CalendarError] = None
        for index, spec in enumerate(specs):
            starts_at = resolve(spec.start_time, reference)
            duration = spec.positive_duration or self.default_duration_minutes
            ends_at = resolve_end(spec.start_time, spec.end_time, duration, reference)
            if starts_at is None or ends_at is None:
                self._emit("spec.unresolvable_time", index=index, start_time=spec.start_time)
                continue
            event = CalendarEvent(
                title=spec.clean_title or self.default_title,
                starts_at=starts_at,
                ends_at=ends_at,
            )
            try:
                await self.store.create(event)
            except CalendarError as exc:
                failure = self._store_failed(IntentAction.CREATE, exc, index=index)
                break
            created += 1

        reply = f"Created {created} event(s) for today." if created else NO_EVENT_CREATED
        return await self._finish(IntentAction.CREATE, reply, created, reference, failure=failure)

    async def _apply_edit(
        self,
        specs: Sequence[EventSpec],
        events: Sequence[CalendarEvent],
        reference: datetime,
    ) -> TurnResult:
        updated = 0
        missing: List[str] = []
        failure: Optional[CalendarError] = None
        for index, spec in enumerate(specs):
            query = spec.clean_title or spec.clean_new_title
            target = match_event(events, query)
            if target is None:
                self._emit("spec.no_match", index=index, query=query)
                continue
            if not target.external_id:
                self._emit("spec.unpersisted_target", index=index, title=target.title)
                continue

            starts_at, duration = self._edit_window(spec, target, reference)
            title = spec.clean_new_title or spec.clean_title or target.title
            try:
                await self.store.update(target.external_id, title=title, starts_at=starts_at, duration=duration)
            except EventNotFoundError as exc:
                self._emit("spec.target_missing", logging.WARNING, index=index, event_ids=list(exc.event_ids))
                missing.extend(exc.event_ids)
                continue
            except CalendarError as exc:
                failure = self._store_failed(IntentAction.EDIT, exc, index=index)
                break
            updated += 1

        reply = f"Updated {updated} event(s) for today." if updated else NO_EVENTS_TO_UPDATE
        return await self._finish(
            IntentAction.EDIT, reply + _missing_note(missing), updated, reference, failure=failure
        )

    async def _apply_delete(
        self,
        specs: Sequence[EventSpec],
        events: Sequence[CalendarEvent],
        reference: datetime,
    ) -> TurnResult:
        identifiers: List[str] = []
        for index, spec in enumerate(specs):
            target = match_event(events, spec.clean_title)
            if target is None:
                self._emit("spec.no_match", index=index, query=spec.clean_title)
                continue
            if not target.external_id:
                self._emit("spec.unpersisted_target", index=index, title=target.title)
                continue
            if target.external_id not in identifiers:
                identifiers.append(target.external_id)

        if not identifiers:
            return TurnResult(reply=NO_EVENTS_TO_DELETE, state=TurnState.APPLYING, action=IntentAction.DELETE)

        missing: List[str] = []
        failure: Optional[CalendarError] = None
        try:
            await self.store.delete_many(identifiers)
        except EventNotFoundError as exc:
            self._emit("spec.target_missing", logging.WARNING, event_ids=list(exc.event_ids))
            missing = list(exc.event_ids)
        except CalendarError as exc:
            failure = self._store_failed(IntentAction.DELETE, exc)

        deleted = 0 if failure else len(identifiers) - len(missing)
        reply = f"Deleted {deleted} event(s) for today." if deleted else NO_EVENTS_TO_DELETE
        return await self._finish(
            IntentAction.DELETE, reply + _missing_note(missing), deleted, reference, failure=failure
        )

    # ------------------------------------------------------------------ helpers

    def _edit_window(
        self,
        spec: EventSpec,
        target: CalendarEvent,
        reference: datetime,
    ) -> Tuple[datetime, timedelta]:
        """Work out the new start and duration for an edited event.

        An explicit end wins over ``durationMinutes``, which wins over the
        event's current duration. When only the end resolves the start stays
        put, unless the new end falls before it, in which case the event is
        moved to finish at that end.
        """

        start = resolve(spec.start_time, reference)
        end = resolve(spec.end_time, reference)
        minutes = spec.positive_duration

        if start is None and end is not None:
            if end > target.starts_at:
                return target.starts_at, end - target.starts_at
            return end - target.duration, target.duration

        starts_at = start or target.starts_at
        if end is not None and end > starts_at:
            return starts_at, end - starts_at
        if minutes:
            return starts_at, timedelta(minutes=minutes)
        return starts_at, target.duration

    def _store_failed(self, action: IntentAction, exc: CalendarError, **fields) -> CalendarError:
        if isinstance(exc, CalendarPermissionDeniedError):
            self._emit("store.permission_denied", logging.WARNING, action=action.value, **fields)
        else:
            self._emit("store.failure", logging.ERROR, action=action.value, error=str(exc), **fields)
        return exc

    async def _finish(
        self,
        action: IntentAction,
        reply: str,
        affected: int,
        reference: datetime,
        *,
        failure: Optional[CalendarError] = None,
    ) -> TurnResult:
        """Build the turn result and reload today's events from the store.

        When a store call failed partway, the reply keeps the count of what
        did go through and carries the failure. A permission failure skips
        the reload.
        """

        result = TurnResult(reply=reply, state=TurnState.APPLYING, action=action, affected=affected)
        if failure is not None:
            denied = isinstance(failure, CalendarPermissionDeniedError)
            message = str(failure) if denied else f"Calendar update failed: {failure}"
            result.reply = f"{reply} {message}" if affected else message
            result.error = message
            result.access_denied = denied
            if denied:
                return result

        try:
            events = await self.store.list_events(DayRange.containing(reference))
        except Exception as exc:  # noqa: BLE001
            self._emit("store.failure", logging.ERROR, action=action.value, stage="refresh", error=str(exc))
            result.reply = f"{result.reply} Today's events could not be reloaded."
            result.error = result.error or str(exc)
            result.access_denied = result.access_denied or isinstance(exc, CalendarPermissionDeniedError)
            return result
        result.events = events
        result.summary = render_context_summary(events)
        return result

    async def _delegate(
        self,
        utterance: str,
        summary: str,
        history: Sequence[ChatMessage],
        *,
        reason: str,
    ) -> TurnResult:
        self.state = TurnState.DELEGATING
        self._emit("turn.delegated", reason=reason)
        reply = await self.fallback.reply(utterance, summary, history)
        return TurnResult(reply=reply.text, state=TurnState.DELEGATING, error=reply.error)

    def _emit(self, event: str, level: int = logging.INFO, **fields) -> None:
        self.diagnostics.emit(Diagnostic(event=event, level=level, fields=fields))
