from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..domain import ChatMessage, MessageRole
from .completion import CompletionClient
from .prompts import build_fallback_prompt

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "The language model is not available right now."
EMPTY_RESPONSE_MESSAGE = "No response"


@dataclass(frozen=True)
class FallbackReply:
    text: str
    error: Optional[str] = None


class ConversationalFallback:
    """Plain chat reply for turns that carry no calendar action."""

    def __init__(self, completion: CompletionClient, *, history_limit: int = 10) -> None:
        self.completion = completion
        self.history_limit = history_limit

    def _transcript(self, history: Sequence[ChatMessage]) -> str:
        recent = list(history)[-self.history_limit :] if self.history_limit > 0 else []
        lines = []
        for message in recent:
            speaker = "User" if message.role is MessageRole.USER else "Assistant"
            lines.append(f"{speaker}: {message.text}")
        return "\n".join(lines)

    async def reply(self, utterance: str, summary: str, history: Sequence[ChatMessage] = ()) -> FallbackReply:
        if not self.completion.is_available:
            return FallbackReply(text=UNAVAILABLE_MESSAGE, error=UNAVAILABLE_MESSAGE)

        prompt = build_fallback_prompt(utterance=utterance, summary=summary, transcript=self._transcript(history))
        try:
            text = await self.completion.respond(prompt)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Conversational completion failed: %s", exc)
            message = f"The assistant could not respond: {exc}"
            return FallbackReply(text=message, error=message)
        return FallbackReply(text=text.strip() or EMPTY_RESPONSE_MESSAGE)
