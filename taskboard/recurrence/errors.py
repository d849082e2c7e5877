"""Exceptions raised by the recurrence core."""


class RecurrenceError(Exception):
    """Base class for recurrence scheduling errors."""


class MalformedRuleError(RecurrenceError):
    """A rule decoded but cannot produce a next occurrence."""

    def __init__(self, message: str, steps: int = 0):
        super().__init__(message)
        self.steps = steps


class DuplicateOccurrenceError(RecurrenceError):
    """An instance for this (series, date) pair already exists."""

    def __init__(self, series_id: str, occurrence_date):
        super().__init__(f"Series {series_id} already has an instance on {occurrence_date}")
        self.series_id = series_id
        self.occurrence_date = occurrence_date
