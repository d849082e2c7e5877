"""Recurring task generation router."""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError

from taskboard.db.config import get_engine
from taskboard.middleware.auth import CurrentUser, get_current_user
from taskboard.services.recurring_task_service import RecurringTaskService
from taskboard.services.task_service import GenerationScope
from taskboard.utils.logger import get_logger

router = APIRouter(tags=["Recurring Tasks"])  # No prefix since main.py adds /api prefix

logger = get_logger("taskboard-api")


class GenerateRequest(BaseModel):
    """Optional body of a generation request."""
    model_config = ConfigDict(populate_by_name=True)

    board_id: Optional[str] = Field(None, alias="boardId")


def get_recurring_task_service() -> RecurringTaskService:
    """Dependency for getting RecurringTaskService instance."""
    return RecurringTaskService(get_engine())


@router.post("/tasks/recurring/generate", response_model=Dict[str, Any])
def generate_recurring_instances(
    payload: Optional[GenerateRequest] = Body(None),
    current_user: CurrentUser = Depends(get_current_user),
    service: RecurringTaskService = Depends(get_recurring_task_service),
):
    """Generate instances for recurring tasks that are due (on board load or by a job).

    Per-series failures are returned in ``failed``; they never fail the request.
    """
    scope = GenerationScope(
        board_id=payload.board_id if payload else None,
        user_id=current_user.user_id,
    )
    try:
        report = service.generate(scope)
    except SQLAlchemyError as e:
        logger.exception("Error generating recurring instances", user_id=current_user.user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate instances",
        )

    body = report.to_dict()
    return {
        "success": True,
        "generated": len(report.created),
        "instances": body["created"],
        "skipped": body["skipped"],
        "failed": body["failed"],
    }
