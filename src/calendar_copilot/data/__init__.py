"""Data access layer: the event store contract and its backends."""

from __future__ import annotations

from .base import EventStore, sort_events
from .json_store import JsonEventStore
from .memory import InMemoryEventStore
from .repositories import SupabaseEventRepository
from .supabase import SupabaseGateway, SupabaseNotConfiguredError

__all__ = [
    "EventStore",
    "InMemoryEventStore",
    "JsonEventStore",
    "SupabaseEventRepository",
    "SupabaseGateway",
    "SupabaseNotConfiguredError",
    "sort_events",
]
