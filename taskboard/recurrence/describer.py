"""Human-readable phrases for recurrence rules, e.g. "Every 2 weeks on Mon, Wed"."""
from typing import Optional

from taskboard.models.recurrence_rule import (
    WEEKDAY_NAMES,
    WEEKDAY_SHORT_NAMES,
    EndType,
    Frequency,
    RecurrenceRule,
)

_SINGULAR = {
    Frequency.DAILY: "Daily",
    Frequency.WEEKLY: "Weekly",
    Frequency.MONTHLY: "Monthly",
    Frequency.YEARLY: "Yearly",
}

_UNITS = {
    Frequency.DAILY: "days",
    Frequency.WEEKLY: "weeks",
    Frequency.MONTHLY: "months",
    Frequency.YEARLY: "years",
}

_WEEK_NAMES = ("first", "second", "third", "fourth", "last")


def ordinal(n: int) -> str:
    """1 -> '1st', 12 -> '12th', 22 -> '22nd'."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def describe(rule: Optional[RecurrenceRule]) -> str:
    """Render a rule for display. Returns an empty string for no rule."""
    if rule is None:
        return ""

    if rule.interval == 1:
        desc = _SINGULAR[rule.frequency]
    else:
        desc = f"Every {rule.interval} {_UNITS[rule.frequency]}"

    if rule.frequency == Frequency.WEEKLY and rule.days_of_week:
        desc += " on " + ", ".join(WEEKDAY_SHORT_NAMES[d] for d in rule.days_of_week)

    if rule.frequency == Frequency.MONTHLY:
        if rule.day_of_month:
            desc += f" on the {ordinal(rule.day_of_month)}"
        elif rule.nth_weekday:
            week, day = rule.nth_weekday
            desc += f" on the {_WEEK_NAMES[week - 1]} {WEEKDAY_NAMES[day]}"

    if rule.end_type == EndType.DATE and rule.end_date:
        end = rule.end_date
        desc += f" until {end.month}/{end.day}/{end.year}"
    elif rule.end_type == EndType.COUNT and rule.end_count:
        desc += f", {rule.end_count} times"

    return desc
