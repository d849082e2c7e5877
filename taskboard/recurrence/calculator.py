"""Next-occurrence calculation for recurring series.

All arithmetic is on calendar dates; time of day never matters. Weekday
indices follow the rule model (0=Sunday .. 6=Saturday).
"""
from datetime import date, datetime, timedelta
from typing import Optional, Sequence, Union

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from taskboard.config import get_settings
from taskboard.config import today as current_day
from taskboard.models.recurrence_rule import (
    LAST_WEEK_OF_MONTH,
    EndType,
    Frequency,
    RecurrenceRule,
    weekday_index,
)
from taskboard.recurrence.codec import decode
from taskboard.recurrence.errors import MalformedRuleError

DateLike = Union[date, datetime]

# dateutil weekday constants indexed 0=Sunday .. 6=Saturday
_WEEKDAYS = (SU, MO, TU, WE, TH, FR, SA)


def _as_date(value: Optional[DateLike]) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


def _next_weekly_day(anchor: date, interval: int, days: Sequence[int]) -> date:
    """Next configured weekday strictly after ``anchor``.

    Days later in the anchor's week (weeks start on Sunday) win; otherwise the
    first configured day of the week ``interval`` weeks on.
    """
    anchor_day = weekday_index(anchor)
    for day in days:
        if day > anchor_day:
            return anchor + timedelta(days=day - anchor_day)
    week_start = anchor - timedelta(days=anchor_day)
    return week_start + timedelta(weeks=interval, days=days[0])


def _advance_monthly(rule: RecurrenceRule, anchor: date) -> date:
    months = relativedelta(months=+rule.interval)
    if rule.day_of_month:
        # relativedelta clamps an absolute day to the end of short months
        return anchor + months + relativedelta(day=rule.day_of_month)
    nth = rule.nth_weekday
    if nth:
        week, day = nth
        if week >= LAST_WEEK_OF_MONTH:
            return anchor + months + relativedelta(day=31, weekday=_WEEKDAYS[day](-1))
        return anchor + months + relativedelta(day=1, weekday=_WEEKDAYS[day](+week))
    return anchor + months


def advance(rule: RecurrenceRule, anchor: date) -> date:
    """One step of the rule from ``anchor``, ignoring today and end conditions."""
    if rule.frequency == Frequency.DAILY:
        return anchor + timedelta(days=rule.interval)
    if rule.frequency == Frequency.WEEKLY:
        if rule.days_of_week:
            return _next_weekly_day(anchor, rule.interval, rule.days_of_week)
        return anchor + timedelta(weeks=rule.interval)
    if rule.frequency == Frequency.MONTHLY:
        return _advance_monthly(rule, anchor)
    if rule.frequency == Frequency.YEARLY:
        return anchor + relativedelta(years=+rule.interval)
    raise MalformedRuleError(f"Unsupported frequency: {rule.frequency!r}")


def _past_end(rule: RecurrenceRule, candidate: date) -> bool:
    return rule.end_type == EndType.DATE and rule.end_date is not None and candidate > rule.end_date


def next_occurrence(
    rule: RecurrenceRule,
    due_date: Optional[DateLike],
    last_recurrence: Optional[DateLike],
    today: Optional[date] = None,
    max_steps: Optional[int] = None,
) -> Optional[date]:
    """
    Compute the next date on which the series is due.

    Args:
        rule: Decoded recurrence rule
        due_date: Anchor date of the series, may be None
        last_recurrence: Date of the most recently generated instance, may be None
        today: Reference day, defaults to today in the configured time zone
        max_steps: Cap on catch-up iterations for long-dormant series

    Returns:
        The next occurrence (never before ``today``), or None once the rule's
        end date has passed. ``endType == count`` is not checked here.

    Raises:
        MalformedRuleError: If catching up needs more than ``max_steps`` steps
            or the rule does not move forward.
    """
    today = today or current_day()
    if max_steps is None:
        max_steps = get_settings().max_catchup_steps

    anchor = _as_date(last_recurrence) or _as_date(due_date) or today
    candidate = advance(rule, anchor)

    steps = 1
    while candidate < today:
        if _past_end(rule, candidate):
            return None
        if steps >= max_steps:
            raise MalformedRuleError(
                f"Rule did not reach {today} from {anchor} within {max_steps} steps", steps=steps
            )
        following = advance(rule, candidate)
        if following <= candidate:
            raise MalformedRuleError(f"Rule does not advance past {candidate}", steps=steps)
        candidate = following
        steps += 1

    if _past_end(rule, candidate):
        return None
    return candidate


def is_instance_due(task, today: Optional[date] = None) -> bool:
    """True when a recurring series has an occurrence due on or before today."""
    if not getattr(task, "is_recurring", False) or not task.recurrence_rule:
        return False
    rule = decode(task.recurrence_rule)
    if rule is None:
        return False

    today = today or current_day()
    if _past_end(rule, today):
        return False

    try:
        upcoming = next_occurrence(rule, task.due_date, task.last_recurrence, today=today)
    except MalformedRuleError:
        return False
    return upcoming is not None and upcoming <= today
