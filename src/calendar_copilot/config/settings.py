from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .paths import DATA_DIR

load_dotenv()


@dataclass(frozen=True)
class LlmSettings:
    api_key: Optional[str]
    model: str
    base_url: Optional[str]
    api_version: Optional[str]
    organization: Optional[str]
    project: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.model)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.api_key:
            missing.append("OPENAI_API_KEY")
        if not self.model:
            missing.append("OPENAI_MODEL")
        return missing


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str]
    anon_key: Optional[str]
    events_table: str
    user_id: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


@dataclass(frozen=True)
class StoreSettings:
    backend: str
    json_path: Path


@dataclass(frozen=True)
class AssistantSettings:
    default_duration_minutes: int
    default_title: str
    history_limit: int
    timezone: Optional[str]
    diagnostics_path: Optional[Path]


@dataclass(frozen=True)
class AppSettings:
    llm: LlmSettings
    supabase: SupabaseSettings
    store: StoreSettings
    assistant: AssistantSettings


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _path_from_env(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    return Path(raw).expanduser() if raw else None


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    llm = LlmSettings(
        api_key=os.getenv("OPENAI_API_KEY"),
        model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        base_url=os.getenv("OPENAI_BASE_URL"),
        api_version=os.getenv("OPENAI_API_VERSION"),
        organization=os.getenv("OPENAI_ORG"),
        project=os.getenv("OPENAI_PROJECT"),
    )

    supabase = SupabaseSettings(
        url=os.getenv("SUPABASE_URL"),
        anon_key=os.getenv("SUPABASE_ANON_KEY"),
        events_table=os.getenv("SUPABASE_EVENTS_TABLE", "calendar_events"),
        user_id=os.getenv("SUPABASE_USER_ID"),
    )

    store = StoreSettings(
        backend=os.getenv("CALENDAR_STORE", "json").strip().lower(),
        json_path=_path_from_env("CALENDAR_JSON_PATH") or DATA_DIR / "events.json",
    )

    assistant = AssistantSettings(
        default_duration_minutes=_int_from_env("CALENDAR_DEFAULT_DURATION_MINUTES", 60),
        default_title=os.getenv("CALENDAR_DEFAULT_TITLE") or "New Event",
        history_limit=_int_from_env("CALENDAR_HISTORY_LIMIT", 10),
        timezone=os.getenv("CALENDAR_TIMEZONE") or None,
        diagnostics_path=_path_from_env("CALENDAR_DIAGNOSTICS_PATH"),
    )

    return AppSettings(llm=llm, supabase=supabase, store=store, assistant=assistant)
