"""Configuration models and helpers."""

from __future__ import annotations

from .paths import APP_NAME, DATA_DIR
from .settings import (
    AppSettings,
    AssistantSettings,
    LlmSettings,
    StoreSettings,
    SupabaseSettings,
    get_settings,
)

__all__ = [
    "APP_NAME",
    "AppSettings",
    "AssistantSettings",
    "DATA_DIR",
    "LlmSettings",
    "StoreSettings",
    "SupabaseSettings",
    "get_settings",
]
