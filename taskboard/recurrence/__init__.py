"""Recurrence scheduling core: rule codec, occurrence calculator and describer."""
from taskboard.recurrence.calculator import is_instance_due, next_occurrence
from taskboard.recurrence.codec import decode, encode
from taskboard.recurrence.describer import describe
from taskboard.recurrence.errors import DuplicateOccurrenceError, MalformedRuleError, RecurrenceError

__all__ = [
    "DuplicateOccurrenceError",
    "MalformedRuleError",
    "RecurrenceError",
    "decode",
    "describe",
    "encode",
    "is_instance_due",
    "next_occurrence",
]
