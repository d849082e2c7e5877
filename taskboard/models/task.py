"""Task model for SQLModel."""
import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel

from taskboard.config import utc_now


class TaskLabel(SQLModel, table=True):
    """Link table between tasks and labels."""

    __tablename__ = "task_label"

    task_id: str = Field(
        sa_column=Column(String, ForeignKey("task.id", ondelete="CASCADE"), primary_key=True)
    )
    label_id: str = Field(
        sa_column=Column(String, ForeignKey("label.id", ondelete="CASCADE"), primary_key=True)
    )


class Task(SQLModel, table=True):
    """Task entity: a plain card, a recurring series template, or a generated instance.

    A series is a task with ``is_recurring=True`` and no ``parent_recurring_id``.
    Instances point at their series through ``parent_recurring_id`` and are
    unique per ``(parent_recurring_id, due_date)``.
    """

    __table_args__ = (
        UniqueConstraint("parent_recurring_id", "due_date", name="uq_task_recurring_occurrence"),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    column_id: str = Field(
        sa_column=Column(String, ForeignKey("board_column.id", ondelete="CASCADE"), index=True, nullable=False)
    )
    title: str = Field(max_length=200, min_length=1)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    position: int = Field(default=0)
    priority: str = Field(default="medium", max_length=20)  # urgent, high, medium, low
    due_date: Optional[date] = Field(default=None, index=True)
    completed: bool = Field(default=False)
    assignee_id: Optional[str] = Field(default=None, max_length=100)
    created_by_id: str = Field(max_length=100)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # Recurring task fields
    is_recurring: bool = Field(default=False, index=True)
    recurrence_rule: Optional[str] = Field(default=None, sa_column=Column(Text))  # JSON RecurrenceRule
    last_recurrence: Optional[date] = Field(default=None)
    parent_recurring_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String, ForeignKey("task.id", ondelete="SET NULL"), index=True),
    )

    @property
    def is_series(self) -> bool:
        """True for a recurring template (not a generated instance)."""
        return self.is_recurring and self.parent_recurring_id is None
