"""Turn the time strings found in intent JSON into concrete datetimes.

Two shapes are understood: full ISO-8601 timestamps (``2026-10-19T14:00:00+02:00``)
and bare times of day (``14:00``, ``930``, ``7pm``, ``7.30 p.m.``). A bare time
is pinned to the calendar date of the reference moment.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

# Tried in this order; the first that parses wins. ``%H`` takes one or two
# digits, so the first entry covers both ``HH:mm`` and ``H:mm``.
BARE_TIME_FORMATS: tuple[str, ...] = (
    "%H:%M",
    "%H%M",
    "%I %p",
    "%I:%M %p",
    "%I.%M %p",
)

_ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_MERIDIEM = re.compile(r"\s*([ap])\.?\s*m\.?$", re.IGNORECASE)


def now(timezone_name: Optional[str] = None) -> datetime:
    """Current time as an aware datetime in the calendar's zone."""

    if timezone_name:
        try:
            return datetime.now(ZoneInfo(timezone_name))
        except ZoneInfoNotFoundError:
            logger.warning("Unknown timezone %r; using the system zone.", timezone_name)
    return datetime.now().astimezone()


def _parse_iso(text: str, reference: datetime) -> Optional[datetime]:
    if not _ISO_PREFIX.match(text):
        return None
    candidate = text[:-1] + "+00:00" if text[-1] in "Zz" else text
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if parsed.tzinfo is None and reference.tzinfo is not None:
        parsed = parsed.replace(tzinfo=reference.tzinfo)
    return parsed


def _parse_bare_time(text: str, reference: datetime) -> Optional[datetime]:
    normalized = _MERIDIEM.sub(lambda match: f" {match.group(1).upper()}M", text)
    for fmt in BARE_TIME_FORMATS:
        try:
            parsed = datetime.strptime(normalized, fmt)
        except ValueError:
            continue
        return reference.replace(hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0)
    return None


def resolve(text: Optional[str], reference: datetime) -> Optional[datetime]:
    """Resolve ``text`` to a datetime, or ``None`` when no format matches."""

    if not text:
        return None
    cleaned = text.strip()
    if not cleaned:
        return None
    return _parse_iso(cleaned, reference) or _parse_bare_time(cleaned, reference)


def resolve_end(
    start_text: Optional[str],
    end_text: Optional[str],
    fallback_duration_minutes: float,
    reference: datetime,
) -> Optional[datetime]:
    """Resolve an end time, falling back to ``start + fallback_duration_minutes``.

    An explicit end that does not come after the start is ignored.
    """

    start = resolve(start_text, reference)
    if start is None:
        return None
    end = resolve(end_text, reference)
    if end is not None and end > start:
        return end
    return start + timedelta(minutes=fallback_duration_minutes)
