from datetime import date, datetime

import pytest
from pydantic import ValidationError

from taskboard.models.recurrence_rule import (
    EndType,
    Frequency,
    RecurrenceRule,
    default_rule,
    weekday_index,
)


def test_defaults():
    rule = RecurrenceRule(frequency="daily")
    assert rule.frequency == Frequency.DAILY
    assert rule.interval == 1
    assert rule.end_type == EndType.NEVER
    assert rule.days_of_week is None


@pytest.mark.parametrize("interval", [0, -3])
def test_non_positive_interval_rejected(interval):
    with pytest.raises(ValidationError):
        RecurrenceRule(frequency="daily", interval=interval)


def test_unknown_frequency_rejected():
    with pytest.raises(ValidationError):
        RecurrenceRule(frequency="hourly")


def test_days_of_week_sorted_and_deduplicated():
    rule = RecurrenceRule(frequency="weekly", days_of_week=[4, 1, 4])
    assert rule.days_of_week == (1, 4)


def test_empty_days_of_week_means_none():
    assert RecurrenceRule(frequency="weekly", days_of_week=[]).days_of_week is None


@pytest.mark.parametrize("days", [[7], [-1], ["mon"], [True], 3])
def test_invalid_days_of_week_rejected(days):
    with pytest.raises(ValidationError):
        RecurrenceRule(frequency="weekly", days_of_week=days)


def test_day_and_week_of_month_bounds():
    with pytest.raises(ValidationError):
        RecurrenceRule(frequency="monthly", day_of_month=32)
    with pytest.raises(ValidationError):
        RecurrenceRule(frequency="monthly", week_of_month=6, days_of_week=[1])


def test_end_type_without_its_value_is_accepted():
    rule = RecurrenceRule(frequency="daily", end_type="date")
    assert rule.end_date is None
    rule = RecurrenceRule(frequency="daily", end_type="count")
    assert rule.end_count is None


def test_blank_end_date_becomes_none():
    rule = RecurrenceRule.model_validate({"frequency": "daily", "endType": "date", "endDate": ""})
    assert rule.end_type == EndType.DATE
    assert rule.end_date is None


def test_end_count_must_be_positive():
    with pytest.raises(ValidationError):
        RecurrenceRule(frequency="daily", end_type="count", end_count=0)


def test_end_date_accepts_iso_datetime_and_truncates():
    rule = RecurrenceRule(frequency="daily", end_type="date", end_date="2025-12-31T18:30:00.000Z")
    assert rule.end_date == date(2025, 12, 31)
    rule = RecurrenceRule(frequency="daily", end_type="date", end_date=datetime(2025, 1, 2, 9, 0))
    assert rule.end_date == date(2025, 1, 2)


def test_camel_case_aliases_populate_fields():
    rule = RecurrenceRule.model_validate(
        {"frequency": "monthly", "weekOfMonth": 2, "daysOfWeek": [2], "endType": "count", "endCount": 4}
    )
    assert rule.week_of_month == 2
    assert rule.nth_weekday == (2, 2)
    assert rule.end_count == 4


def test_nth_weekday_ignored_when_day_of_month_set():
    rule = RecurrenceRule(frequency="monthly", day_of_month=15, week_of_month=2, days_of_week=[2])
    assert rule.nth_weekday is None


def test_rules_are_immutable():
    rule = RecurrenceRule(frequency="daily")
    with pytest.raises(ValidationError):
        rule.interval = 3


def test_weekday_index_starts_on_sunday():
    assert weekday_index(date(2024, 3, 3)) == 0  # Sunday
    assert weekday_index(date(2024, 3, 4)) == 1  # Monday
    assert weekday_index(date(2024, 3, 9)) == 6  # Saturday


def test_default_rule_weekly_uses_todays_weekday():
    rule = default_rule("weekly", today=date(2024, 3, 7))  # Thursday
    assert rule.days_of_week == (4,)
    assert rule.end_type == EndType.NEVER


def test_default_rule_monthly_uses_todays_date():
    assert default_rule(Frequency.MONTHLY, today=date(2024, 3, 7)).day_of_month == 7


def test_default_rule_daily():
    assert default_rule(today=date(2024, 3, 7)) == RecurrenceRule(frequency="daily")
