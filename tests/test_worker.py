import asyncio
from dataclasses import replace
from datetime import timedelta

from sqlmodel import Session, select

from taskboard.config import get_settings, today
from taskboard.models.task import Task
from taskboard.services.recurring_task_service import RecurringTaskService
from taskboard.worker import run_forever, run_once


def test_run_once_generates_for_all_boards(engine, make_series, other_board, notifications):
    service = RecurringTaskService(engine, notifier=notifications.append)
    make_series({"frequency": "daily"}, due_date=today())
    make_series({"frequency": "daily"}, due_date=today(), column_id=other_board.column_id)

    report = asyncio.run(run_once(service))
    assert len(report.created) == 2
    assert {c.occurrence_date for c in report.created} == {today() + timedelta(days=1)}


def test_run_forever_repeats_without_duplicates(engine, make_series, notifications):
    service = RecurringTaskService(engine, notifier=notifications.append)
    series_id = make_series({"frequency": "weekly"}, due_date=today())
    settings = replace(get_settings(), job_interval_seconds=0)

    asyncio.run(run_forever(service, settings, iterations=3))

    with Session(engine) as session:
        instances = session.exec(select(Task).where(Task.parent_recurring_id == series_id)).all()
    assert len(instances) == 1
    assert len(notifications) == 1


def test_run_forever_survives_failed_run(engine, notifications):
    calls = []

    class ExplodingService(RecurringTaskService):
        def generate(self, scope=None, today=None):
            calls.append(1)
            raise RuntimeError("database unreachable")

    service = ExplodingService(engine, notifier=notifications.append)
    settings = replace(get_settings(), job_interval_seconds=0)

    asyncio.run(run_forever(service, settings, iterations=2))
    assert len(calls) == 2
