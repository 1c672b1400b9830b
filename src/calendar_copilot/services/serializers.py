from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain import CalendarEvent, ChatMessage


class EventPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None)
    title: str
    starts_at: str
    ends_at: str
    location: Optional[str] = Field(default=None)
    is_all_day: bool = Field(default=False)
    alert: str
    repeat_rule: str
    travel_time: str
    notes: Optional[str] = Field(default=None)
    url: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, event: CalendarEvent) -> "EventPayload":
        return cls(
            id=event.external_id,
            title=event.title,
            starts_at=event.starts_at.isoformat(),
            ends_at=event.ends_at.isoformat(),
            location=event.location,
            is_all_day=event.is_all_day,
            alert=event.alert.value,
            repeat_rule=event.repeat_rule.value,
            travel_time=event.travel_time.value,
            notes=event.notes,
            url=event.url,
        )


class MessagePayload(BaseModel):
    id: str
    role: str
    text: str
    created_at: str

    @classmethod
    def from_domain(cls, message: ChatMessage) -> "MessagePayload":
        return cls(**message.to_dict())


def serialize_event(event: CalendarEvent) -> Dict[str, Any]:
    return EventPayload.from_domain(event).model_dump()


def serialize_message(message: ChatMessage) -> Dict[str, Any]:
    return MessagePayload.from_domain(message).model_dump()
