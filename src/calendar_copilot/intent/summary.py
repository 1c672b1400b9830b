from __future__ import annotations

from typing import Sequence

from ..domain import CalendarEvent

EMPTY_SUMMARY = "No events scheduled for today."


def _clock(value) -> str:
    return value.strftime("%H:%M")


def describe_event(event: CalendarEvent) -> str:
    location = f" @ {event.location}" if event.location else ""
    return f"- {event.title}{location} from {_clock(event.starts_at)} to {_clock(event.ends_at)}"


def render_context_summary(events: Sequence[CalendarEvent]) -> str:
    if not events:
        return EMPTY_SUMMARY
    return "\n".join(describe_event(event) for event in events)
