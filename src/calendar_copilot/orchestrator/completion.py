from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

from openai import AsyncOpenAI

from ..config import LlmSettings, get_settings
from .prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)


@runtime_checkable
class CompletionClient(Protocol):
    """Black-box text completion service.

    ``is_available`` is checked before every call; an unavailable client is a
    normal state, not an error.
    """

    @property
    def is_available(self) -> bool: ...

    async def respond(self, prompt: str) -> str: ...


class OpenAICompletionClient:
    """Single-turn completions against an OpenAI-compatible endpoint."""

    def __init__(
        self,
        settings: Optional[LlmSettings] = None,
        *,
        system_prompt: str = SYSTEM_PROMPT,
        temperature: float = 0.2,
    ) -> None:
        self.settings = settings or get_settings().llm
        self.system_prompt = system_prompt
        self.temperature = temperature
        self._client: Optional[AsyncOpenAI] = None

    @property
    def is_available(self) -> bool:
        return self.settings.is_configured

    def _ensure_client(self) -> Optional[AsyncOpenAI]:
        if not self.settings.is_configured:
            return None
        if self._client is None:
            default_query = {}
            if self.settings.api_version:
                default_query["api-version"] = self.settings.api_version
            self._client = AsyncOpenAI(
                api_key=self.settings.api_key,
                base_url=self.settings.base_url,
                organization=self.settings.organization,
                project=self.settings.project,
                default_query=default_query or None,
            )
        return self._client

    async def respond(self, prompt: str) -> str:
        client = self._ensure_client()
        if client is None:
            missing = ", ".join(self.settings.missing_env_vars)
            raise RuntimeError(f"Language model is not configured. Missing: {missing}")

        completion = await client.chat.completions.create(
            model=self.settings.model,
            temperature=self.temperature,
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
        )
        content = completion.choices[0].message.content or ""
        logger.debug("Completion returned %d characters", len(content))
        return content.strip()
