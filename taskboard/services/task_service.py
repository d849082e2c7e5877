"""Task persistence operations used by recurring instance generation."""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlmodel import Session, select

from taskboard.config import utc_now
from taskboard.models.board import BoardColumn, BoardMember
from taskboard.models.task import Task, TaskLabel


@dataclass(frozen=True)
class GenerationScope:
    """Which series a generation run looks at.

    ``board_id`` limits the run to one board. ``user_id`` limits it to boards
    the user is a member of; None means a trusted internal caller (all boards).
    """

    board_id: Optional[str] = None
    user_id: Optional[str] = None


class TaskService:
    """Read model and write operations over tasks, bound to one session."""

    def __init__(self, session: Session):
        self.session = session

    def list_series(self, scope: GenerationScope) -> List[Task]:
        """Recurring templates (not instances) inside the scope, oldest first."""
        statement = (
            select(Task)
            .join(BoardColumn, BoardColumn.id == Task.column_id)
            .where(Task.is_recurring == True)
            .where(Task.parent_recurring_id.is_(None))
        )
        if scope.board_id:
            statement = statement.where(BoardColumn.board_id == scope.board_id)
        if scope.user_id:
            members = select(BoardMember.board_id).where(BoardMember.user_id == scope.user_id)
            statement = statement.where(BoardColumn.board_id.in_(members))
        statement = statement.order_by(Task.created_at.asc(), Task.id.asc())
        return list(self.session.exec(statement).all())

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.session.get(Task, task_id)

    def board_id_for_column(self, column_id: str) -> Optional[str]:
        column = self.session.get(BoardColumn, column_id)
        return column.board_id if column else None

    def count_instances(self, series_id: str) -> int:
        """Number of instances ever generated from a series."""
        statement = select(func.count()).select_from(Task).where(Task.parent_recurring_id == series_id)
        return self.session.exec(statement).one()

    def find_instance(self, series_id: str, occurrence: date) -> Optional[Task]:
        statement = (
            select(Task)
            .where(Task.parent_recurring_id == series_id)
            .where(Task.due_date == occurrence)
        )
        return self.session.exec(statement).first()

    def label_ids(self, task_id: str) -> List[str]:
        statement = select(TaskLabel.label_id).where(TaskLabel.task_id == task_id)
        return list(self.session.exec(statement).all())

    def create_instance(self, series: Task, occurrence: date, label_ids: Sequence[str]) -> Task:
        """Snapshot a series into a new, open task due on ``occurrence``.

        The instance is flushed but not committed.
        """
        now = utc_now()
        instance = Task(
            column_id=series.column_id,
            title=series.title,
            description=series.description,
            position=0,
            priority=series.priority,
            due_date=occurrence,
            completed=False,
            assignee_id=series.assignee_id,
            created_by_id=series.created_by_id,
            is_recurring=False,
            parent_recurring_id=series.id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(instance)
        self.session.flush()

        for label_id in label_ids:
            self.session.add(TaskLabel(task_id=instance.id, label_id=label_id))
        self.session.flush()
        return instance

    def mark_fired(self, series: Task, occurrence: date) -> Task:
        """Advance the series' last-recurrence marker."""
        series.last_recurrence = occurrence
        series.updated_at = utc_now()
        self.session.add(series)
        return series

    def shift_column_positions(self, column_id: str, exclude_task_id: str) -> int:
        """Move every other task in the column down one position."""
        statement = (
            select(Task)
            .where(Task.column_id == column_id)
            .where(Task.id != exclude_task_id)
        )
        tasks = self.session.exec(statement).all()
        for task in tasks:
            task.position += 1
            self.session.add(task)
        return len(tasks)
