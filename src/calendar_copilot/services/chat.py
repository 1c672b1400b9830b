from __future__ import annotations

import logging
from typing import List, Optional

from ..domain import CalendarEvent, ChatMessage, MessageRole
from ..orchestrator import IntentReconciler, TurnResult
from .calendar import CalendarService

logger = logging.getLogger(__name__)


class ChatSession:
    """One conversation: transcript, today's calendar, and the turn guard.

    Only one turn runs at a time; a message sent while a turn is in flight is
    dropped rather than queued.
    """

    def __init__(self, calendar: CalendarService, reconciler: IntentReconciler) -> None:
        self.calendar = calendar
        self.reconciler = reconciler
        self.messages: List[ChatMessage] = []
        self.is_processing = False
        self.error_message: Optional[str] = None
        self.last_result: Optional[TurnResult] = None

    @property
    def events(self) -> List[CalendarEvent]:
        return self.calendar.events

    @property
    def context_summary(self) -> str:
        return self.calendar.context_summary

    async def load_today_events(self) -> bool:
        return await self.calendar.load_today_events()

    async def send_message(self, text: Optional[str]) -> Optional[ChatMessage]:
        trimmed = (text or "").strip()
        if not trimmed:
            return None
        if self.is_processing:
            logger.info("Turn already in progress; dropping message.")
            return None

        self.is_processing = True
        self.error_message = None
        history = list(self.messages)
        self.messages.append(ChatMessage(role=MessageRole.USER, text=trimmed))
        try:
            if not self.calendar.loaded:
                # Edits and deletes match against this snapshot.
                await self.calendar.load_today_events()
            result = await self.reconciler.handle(
                trimmed,
                events=self.calendar.events,
                summary=self.calendar.context_summary,
                reference=self.calendar.clock(),
                history=history,
            )
        finally:
            self.is_processing = False

        self._absorb(result)
        reply = ChatMessage(role=MessageRole.ASSISTANT, text=result.reply)
        self.messages.append(reply)
        return reply

    def _absorb(self, result: TurnResult) -> None:
        self.last_result = result
        if result.events is not None:
            self.calendar.replace_snapshot(result.events, result.summary)
        if result.access_denied:
            self.calendar.access_denied = True
        self.error_message = result.error
