from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from uuid import uuid4

from .enums import AlertOption, MessageRole, RepeatFrequency, TravelTimeOption


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    raise ValueError(f"Unsupported datetime value: {value!r}")


@dataclass(slots=True)
class CalendarEvent:
    title: str
    starts_at: datetime
    ends_at: datetime
    external_id: Optional[str] = None
    location: Optional[str] = None
    is_all_day: bool = False
    alert: AlertOption = AlertOption.NONE
    repeat_rule: RepeatFrequency = RepeatFrequency.NONE
    travel_time: TravelTimeOption = TravelTimeOption.NONE
    notes: Optional[str] = None
    url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("Event title must not be empty.")
        if self.ends_at <= self.starts_at:
            raise ValueError(f"Event '{self.title}' must end after it starts.")

    @property
    def duration(self) -> timedelta:
        return self.ends_at - self.starts_at

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CalendarEvent":
        identifier = record.get("id")
        return cls(
            external_id=str(identifier) if identifier is not None else None,
            title=str(record["title"]),
            starts_at=_parse_datetime(record["starts_at"]),
            ends_at=_parse_datetime(record["ends_at"]),
            location=record.get("location") or None,
            is_all_day=bool(record.get("is_all_day", False)),
            alert=AlertOption(record.get("alert") or AlertOption.NONE),
            repeat_rule=RepeatFrequency(record.get("repeat_rule") or RepeatFrequency.NONE),
            travel_time=TravelTimeOption(record.get("travel_time") or TravelTimeOption.NONE),
            notes=record.get("notes") or None,
            url=record.get("url") or None,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.external_id,
            "title": self.title,
            "starts_at": self.starts_at.isoformat(),
            "ends_at": self.ends_at.isoformat(),
            "location": self.location,
            "is_all_day": self.is_all_day,
            "alert": self.alert.value,
            "repeat_rule": self.repeat_rule.value,
            "travel_time": self.travel_time.value,
            "notes": self.notes,
            "url": self.url,
        }


@dataclass(frozen=True, slots=True)
class DayRange:
    """Half-open ``[start, end)`` window covering one local calendar day."""

    start: datetime
    end: datetime

    @classmethod
    def containing(cls, moment: datetime) -> "DayRange":
        start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        return cls(start=start, end=start + timedelta(days=1))

    def overlaps(self, event: CalendarEvent) -> bool:
        return event.starts_at < self.end and event.ends_at > self.start


@dataclass(frozen=True, slots=True)
class ChatMessage:
    role: MessageRole
    text: str
    id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now().astimezone())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "text": self.text,
            "created_at": self.created_at.isoformat(),
        }
