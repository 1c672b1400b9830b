"""Supabase repositories for first-class domain objects."""

from __future__ import annotations

from .events import SupabaseEventRepository

__all__ = ["SupabaseEventRepository"]
