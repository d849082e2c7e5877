"""SQLModel tables and value types."""
from taskboard.models.board import Board, BoardColumn, BoardMember, Label
from taskboard.models.recurrence_rule import EndType, Frequency, RecurrenceRule
from taskboard.models.task import Task, TaskLabel

__all__ = [
    "Board",
    "BoardColumn",
    "BoardMember",
    "EndType",
    "Frequency",
    "Label",
    "RecurrenceRule",
    "Task",
    "TaskLabel",
]
