from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, select

from taskboard.config import get_settings, today
from taskboard.main import app
from taskboard.models.task import Task
from taskboard.routers.recurring import get_recurring_task_service
from taskboard.services.recurring_task_service import RecurringTaskService

from tests.conftest import MEMBER_ID


def auth_header(user_id=MEMBER_ID, **claims):
    token = jwt.encode({"sub": user_id, **claims}, get_settings().auth_secret, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(engine, notifications):
    app.dependency_overrides[get_recurring_task_service] = lambda: RecurringTaskService(
        engine, notifier=notifications.append
    )
    # Not used as a context manager, so startup does not touch the default database
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert "recurring_generation_runs_total" in body["metrics"]["counters"]


def test_generate_requires_token(client):
    response = client.post("/api/tasks/recurring/generate")
    assert response.status_code == 401


def test_generate_rejects_bad_and_expired_tokens(client):
    response = client.post("/api/tasks/recurring/generate", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401

    expired = auth_header(exp=datetime.now(timezone.utc) - timedelta(minutes=5))
    response = client.post("/api/tasks/recurring/generate", headers=expired)
    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"


def test_generate_for_board(client, engine, make_series, board):
    series_id = make_series({"frequency": "weekly"}, due_date=today())

    response = client.post("/api/tasks/recurring/generate", json={"boardId": board.id}, headers=auth_header())
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["generated"] == 1
    assert body["instances"][0]["seriesId"] == series_id
    assert "instanceId" in body["instances"][0]
    assert body["instances"][0]["occurrenceDate"] == (today() + timedelta(days=7)).isoformat()
    assert body["failed"] == []

    # Loading the board again is a no-op
    response = client.post("/api/tasks/recurring/generate", json={"boardId": board.id}, headers=auth_header())
    assert response.json()["generated"] == 0
    assert response.json()["skipped"] == [series_id]

    with Session(engine) as session:
        count = len(session.exec(select(Task).where(Task.parent_recurring_id == series_id)).all())
    assert count == 1


def test_generate_without_body_uses_member_boards(client, make_series, other_board):
    mine = make_series({"frequency": "daily"}, due_date=today())
    make_series({"frequency": "daily"}, due_date=today(), column_id=other_board.column_id)

    response = client.post("/api/tasks/recurring/generate", headers=auth_header())
    assert response.status_code == 200
    assert [i["seriesId"] for i in response.json()["instances"]] == [mine]


def test_generate_for_invisible_board_creates_nothing(client, make_series, other_board):
    make_series({"frequency": "daily"}, due_date=today(), column_id=other_board.column_id)

    response = client.post(
        "/api/tasks/recurring/generate", json={"boardId": other_board.id}, headers=auth_header()
    )
    assert response.status_code == 200
    assert response.json()["generated"] == 0
