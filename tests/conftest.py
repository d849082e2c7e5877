import os

# Keep the suite offline and quiet regardless of the developer's .env
os.environ["PUBLISH_EVENTS"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date
from types import SimpleNamespace
from typing import Optional, Union

import pytest
from sqlmodel import Session

from taskboard.db.config import build_engine
from taskboard.db.init import init_db
from taskboard.models.board import Board, BoardColumn, BoardMember, Label
from taskboard.models.recurrence_rule import RecurrenceRule
from taskboard.models.task import Task, TaskLabel
from taskboard.recurrence.codec import encode
from taskboard.services.recurring_task_service import RecurringTaskService
from taskboard.utils.metrics import metrics_collector

MEMBER_ID = "user-1"


@pytest.fixture
def engine(tmp_path):
    # File database so several sessions and threads share one store
    eng = build_engine(f"sqlite:///{tmp_path / 'taskboard.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


def _seed_board(engine, name: str, member_id: Optional[str]):
    with Session(engine) as session:
        board = Board(name=name)
        session.add(board)
        session.flush()
        column = BoardColumn(board_id=board.id, name="To Do")
        label = Label(board_id=board.id, name="chores", color="#22c55e")
        session.add(column)
        session.add(label)
        if member_id:
            session.add(BoardMember(board_id=board.id, user_id=member_id, role="owner"))
        session.commit()
        return SimpleNamespace(id=board.id, column_id=column.id, label_id=label.id)


@pytest.fixture
def board(engine):
    return _seed_board(engine, "Household", MEMBER_ID)


@pytest.fixture
def other_board(engine):
    return _seed_board(engine, "Someone else's board", "user-2")


@pytest.fixture
def make_series(engine, board):
    """Insert a recurring series and return its id."""

    def _make(
        rule: Union[RecurrenceRule, dict, str, None],
        due_date: Optional[date] = None,
        last_recurrence: Optional[date] = None,
        column_id: Optional[str] = None,
        title: str = "Water the plants",
        labels=None,
        **fields,
    ) -> str:
        if isinstance(rule, dict):
            rule = RecurrenceRule(**rule)
        raw = encode(rule) if isinstance(rule, RecurrenceRule) else rule
        with Session(engine) as session:
            task = Task(
                column_id=column_id or board.column_id,
                title=title,
                created_by_id=MEMBER_ID,
                is_recurring=True,
                recurrence_rule=raw,
                due_date=due_date,
                last_recurrence=last_recurrence,
                **fields,
            )
            session.add(task)
            session.flush()
            for label_id in labels if labels is not None else [board.label_id]:
                session.add(TaskLabel(task_id=task.id, label_id=label_id))
            session.commit()
            return task.id

    return _make


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def service(engine, notifications):
    return RecurringTaskService(engine, notifier=notifications.append)


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics_collector.reset()
    yield
