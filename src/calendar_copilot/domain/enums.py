from __future__ import annotations

from enum import Enum
from typing import Optional


class AlertOption(str, Enum):
    NONE = "none"
    AT_TIME = "at_time"
    FIVE_MIN = "five_min"
    FIFTEEN_MIN = "fifteen_min"
    THIRTY_MIN = "thirty_min"
    ONE_HOUR = "one_hour"
    ONE_DAY = "one_day"

    @property
    def text(self) -> str:
        return _ALERT_TEXT[self]

    @property
    def minutes_before(self) -> Optional[int]:
        return _ALERT_MINUTES[self]


_ALERT_TEXT = {
    AlertOption.NONE: "None",
    AlertOption.AT_TIME: "At time of event",
    AlertOption.FIVE_MIN: "5 minutes before",
    AlertOption.FIFTEEN_MIN: "15 minutes before",
    AlertOption.THIRTY_MIN: "30 minutes before",
    AlertOption.ONE_HOUR: "1 hour before",
    AlertOption.ONE_DAY: "1 day before",
}

_ALERT_MINUTES = {
    AlertOption.NONE: None,
    AlertOption.AT_TIME: 0,
    AlertOption.FIVE_MIN: 5,
    AlertOption.FIFTEEN_MIN: 15,
    AlertOption.THIRTY_MIN: 30,
    AlertOption.ONE_HOUR: 60,
    AlertOption.ONE_DAY: 1440,
}


class RepeatFrequency(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def text(self) -> str:
        return _REPEAT_TEXT[self]


_REPEAT_TEXT = {
    RepeatFrequency.NONE: "None",
    RepeatFrequency.DAILY: "Every Day",
    RepeatFrequency.WEEKLY: "Every Week",
    RepeatFrequency.MONTHLY: "Every Month",
    RepeatFrequency.YEARLY: "Every Year",
}


class TravelTimeOption(str, Enum):
    NONE = "none"
    FIVE = "five"
    FIFTEEN = "fifteen"
    THIRTY = "thirty"
    ONE_HOUR = "one_hour"

    @property
    def minutes(self) -> Optional[int]:
        return _TRAVEL_MINUTES[self]

    @property
    def text(self) -> str:
        minutes = self.minutes
        if minutes is None:
            return "None"
        if minutes == 60:
            return "1 hour"
        return f"{minutes} minutes"


_TRAVEL_MINUTES = {
    TravelTimeOption.NONE: None,
    TravelTimeOption.FIVE: 5,
    TravelTimeOption.FIFTEEN: 15,
    TravelTimeOption.THIRTY: 30,
    TravelTimeOption.ONE_HOUR: 60,
}


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
