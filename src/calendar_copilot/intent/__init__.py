"""Calendar intent interpretation: time parsing, intent decoding, matching."""

from __future__ import annotations

from .matcher import match_event
from .schema import CalendarIntent, EventSpec, IntentAction, parse_intent
from .summary import EMPTY_SUMMARY, render_context_summary
from .timeparse import resolve, resolve_end

__all__ = [
    "CalendarIntent",
    "EMPTY_SUMMARY",
    "EventSpec",
    "IntentAction",
    "match_event",
    "parse_intent",
    "render_context_summary",
    "resolve",
    "resolve_end",
]
