"""Recurrence rule value type.

A rule is stored on its series task as JSON text. The JSON keys are camelCase
(``daysOfWeek``, ``endType``...) so payloads written by the web client decode
unchanged; Python code uses the snake_case attribute names.

Weekday indices run 0=Sunday .. 6=Saturday.

An end condition without its value (``endType: "date"`` with no ``endDate``,
``endType: "count"`` with no ``endCount``) never ends the series; the client
writes such rules while the user is still filling in the form.
"""
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskboard.config import today as current_day

WEEKDAY_SHORT_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

# weekOfMonth value meaning "last occurrence in the month"
LAST_WEEK_OF_MONTH = 5


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class EndType(str, Enum):
    NEVER = "never"
    DATE = "date"
    COUNT = "count"


def weekday_index(day: date) -> int:
    """Weekday of ``day`` as 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


class RecurrenceRule(BaseModel):
    """Immutable recurrence configuration of a series."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    frequency: Frequency
    interval: int = Field(default=1, ge=1)
    days_of_week: Optional[Tuple[int, ...]] = Field(default=None, alias="daysOfWeek")
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31, alias="dayOfMonth")
    week_of_month: Optional[int] = Field(default=None, ge=1, le=LAST_WEEK_OF_MONTH, alias="weekOfMonth")
    end_type: EndType = Field(default=EndType.NEVER, alias="endType")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    end_count: Optional[int] = Field(default=None, ge=1, alias="endCount")

    @field_validator("days_of_week", mode="before")
    @classmethod
    def _normalize_days(cls, value):
        if value is None:
            return None
        if not isinstance(value, (list, tuple, set)):
            raise ValueError("daysOfWeek must be a list")
        days = set()
        for day in value:
            if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
                raise ValueError(f"daysOfWeek entries must be integers 0-6, got {day!r}")
            days.add(day)
        # Empty selections behave like "no specific days"
        return tuple(sorted(days)) or None

    @field_validator("end_date", mode="before")
    @classmethod
    def _truncate_end_date(cls, value):
        # A cleared date input is stored as ""
        if isinstance(value, str) and not value.strip():
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value) > 10:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        return value

    @property
    def nth_weekday(self) -> Optional[Tuple[int, int]]:
        """``(week_of_month, weekday)`` for "2nd Tuesday" style monthly rules."""
        if self.day_of_month is None and self.week_of_month and self.days_of_week:
            return self.week_of_month, self.days_of_week[0]
        return None


def default_rule(frequency: Frequency = Frequency.DAILY, today: Optional[date] = None) -> RecurrenceRule:
    """Rule used when recurrence is first switched on for a task.

    Weekly rules default to today's weekday and monthly rules to today's
    day of the month.
    """
    today = today or current_day()
    frequency = Frequency(frequency)
    if frequency == Frequency.WEEKLY:
        return RecurrenceRule(frequency=frequency, days_of_week=[weekday_index(today)])
    if frequency == Frequency.MONTHLY:
        return RecurrenceRule(frequency=frequency, day_of_month=today.day)
    return RecurrenceRule(frequency=frequency)
