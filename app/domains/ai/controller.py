"""AI API controller with FastAPI endpoints."""

import logging

from fastapi import APIRouter, Body, Depends

from app.core.dependencies import get_ai_gateway, get_identity
from app.domains.ai.service import AIGateway
from app.exceptions.base import ValidationError
from app.schemas.ai import (
    ContextQuestionsRequest,
    ContextQuestionsResult,
    ExpandTaskRequest,
    TaskAssistanceRequest,
    TaskReviewRequest,
)
from app.schemas.base import ResponseSchema

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/ai",
    tags=["ai"],
    dependencies=[Depends(get_identity)],  # Global token validation for all routes
)


def _require_title(title: str | None) -> str:
    if not title or not title.strip():
        raise ValidationError("Task title is required")
    return title.strip()


@router.post("/expand-task", response_model=ResponseSchema)
async def expand_task(
    payload: ExpandTaskRequest = Body(...),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    """Break a task down into actionable subtasks."""
    title = _require_title(payload.task_title)
    result = await gateway.expand_task(title, payload.task_description, payload.existing_subtasks)

    return ResponseSchema(
        status="success",
        message="Task expanded successfully",
        data=result.model_dump(),
    )


@router.post("/task-assistance", response_model=ResponseSchema)
async def task_assistance(
    payload: TaskAssistanceRequest = Body(...),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    """Answer a question about a task."""
    title = _require_title(payload.task_title)
    result = await gateway.get_task_assistance(
        title, payload.task_description, payload.user_query, payload.project_context
    )

    return ResponseSchema(
        status="success",
        message="Task assistance generated successfully",
        data=result.model_dump(),
    )


@router.post("/task-review", response_model=ResponseSchema)
async def task_review(
    payload: TaskReviewRequest = Body(...),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    """Review a task draft before creation."""
    _require_title(payload.task_data.title)
    result = await gateway.review_task_creation(
        payload.task_data.model_dump(exclude_none=True),
        [event.model_dump(mode="json") for event in payload.calendar_events],
    )

    return ResponseSchema(
        status="success",
        message="Task review generated successfully",
        data=result.model_dump(),
    )


@router.post("/context-questions", response_model=ResponseSchema)
async def context_questions(
    payload: ContextQuestionsRequest = Body(...),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    """Generate planning questions for a task draft."""
    _require_title(payload.task_data.title)
    questions = await gateway.generate_context_questions(
        payload.task_data.model_dump(exclude_none=True)
    )

    return ResponseSchema(
        status="success",
        message="Context questions generated successfully",
        data=ContextQuestionsResult(questions=questions).model_dump(),
    )
