from __future__ import annotations

from typing import Optional, Sequence

from ..domain import CalendarEvent


def match_event(events: Sequence[CalendarEvent], query: Optional[str]) -> Optional[CalendarEvent]:
    """Return the earliest event whose title contains ``query``, ignoring case."""

    needle = (query or "").strip().lower()
    if not needle:
        return None
    for event in events:
        if needle in event.title.lower():
            return event
    return None
