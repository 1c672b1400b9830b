"""Structured calendar intents decoded from model output.

The completion model is asked for JSON but often wraps it in prose, so
:func:`parse_intent` cuts the text from the first ``{`` to the last ``}``
before decoding. Anything that does not decode cleanly is treated as "not a
calendar request" and yields ``None``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class IntentAction(str, Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    UNKNOWN = "unknown"


class EventSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = Field(default=None)
    new_title: Optional[str] = Field(default=None, alias="newTitle")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    duration_minutes: Optional[float] = Field(default=None, alias="durationMinutes")

    @property
    def clean_title(self) -> Optional[str]:
        return _clean(self.title)

    @property
    def clean_new_title(self) -> Optional[str]:
        return _clean(self.new_title)

    @property
    def positive_duration(self) -> Optional[float]:
        # Sub-minute values are treated as absent.
        if self.duration_minutes is None or self.duration_minutes < 1:
            return None
        return self.duration_minutes


class CalendarIntent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: IntentAction = Field(default=IntentAction.UNKNOWN)
    clarification: str = Field(default="")
    event_specs: List[EventSpec] = Field(default_factory=list, alias="events")

    @field_validator("action", mode="before")
    @classmethod
    def _coerce_action(cls, value: Any) -> IntentAction:
        if isinstance(value, str):
            try:
                return IntentAction(value.strip().lower())
            except ValueError:
                return IntentAction.UNKNOWN
        return IntentAction.UNKNOWN

    @field_validator("clarification", mode="before")
    @classmethod
    def _coerce_clarification(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("event_specs", mode="before")
    @classmethod
    def _coerce_events(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def needs_clarification(self) -> bool:
        return bool(self.clarification.strip())


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def extract_json_object(raw: str) -> Optional[str]:
    """Return the text between the first ``{`` and the last ``}``, inclusive."""

    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None
    return raw[start : end + 1]


def parse_intent(raw: Optional[str]) -> Optional[CalendarIntent]:
    if not raw:
        return None
    payload = extract_json_object(raw)
    if payload is None:
        logger.debug("No JSON object found in model output.")
        return None
    try:
        return CalendarIntent.model_validate_json(payload)
    except ValidationError as exc:
        logger.debug("Model output is not a valid intent: %s", exc.errors(include_url=False))
        return None
