"""Task API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import (
    get_current_user,
    get_db,
    get_identity,
    get_or_create_current_user,
)
from app.domains.scheduling.service import SchedulingService
from app.domains.task.service import TaskService
from app.exceptions.base import ValidationError
from app.schemas.base import ResponseSchema
from app.schemas.scheduling import ScheduleSuggestionRequest, ScheduleSuggestionResponse
from app.schemas.task import TaskCreate, TaskFilter, TaskListItem, TaskUpdate
from models import TaskStatus, User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
    dependencies=[Depends(get_identity)],  # Global token validation for all routes
)


def _parse_filters(
    status: TaskStatus | None,
    category_id: UUID | None,
    parent_id: str | None,
    task_type: str | None,
) -> TaskFilter:
    if task_type == "projects":
        return TaskFilter(projects_only=True)

    filters = TaskFilter(status=status, category_id=category_id)
    if parent_id == "null":
        filters.top_level_only = True
    elif parent_id:
        try:
            filters.parent_id = UUID(parent_id)
        except ValueError:
            raise ValidationError("parent_id: Input should be a valid UUID")
    return filters


@router.get("", response_model=ResponseSchema)
async def get_tasks(
    status: TaskStatus | None = Query(None),
    category_id: UUID | None = Query(None),
    parent_id: str | None = Query(None, description='Parent task ID or "null" for top level'),
    task_type: str | None = Query(None, alias="type"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get tasks with optional filters."""
    filters = _parse_filters(status, category_id, parent_id, task_type)
    tasks = await TaskService(db).get_tasks_list(current_user.id, filters)

    return ResponseSchema(
        status="success",
        message="Tasks retrieved successfully",
        data=[TaskListItem.model_validate(task).model_dump(mode="json") for task in tasks],
    )


@router.post("", response_model=ResponseSchema, status_code=201)
async def create_task(
    task_data: TaskCreate,
    current_user: User = Depends(get_or_create_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new task."""
    task = await TaskService(db).create_task(task_data, current_user.id)

    return ResponseSchema(
        status="success",
        message="Task created successfully",
        data=TaskListItem.model_validate(task).model_dump(mode="json"),
    )


@router.get("/{task_id}", response_model=ResponseSchema)
async def get_task(
    task_id: UUID = Path(..., description="Task ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a task with its full subtree."""
    tree = await TaskService(db).get_task_tree(task_id, current_user.id)

    return ResponseSchema(
        status="success",
        message="Task retrieved successfully",
        data=tree.model_dump(mode="json"),
    )


@router.put("/{task_id}", response_model=ResponseSchema)
async def update_task(
    task_id: UUID = Path(..., description="Task ID"),
    task_data: TaskUpdate = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a specific task."""
    tree = await TaskService(db).update_task(task_id, task_data, current_user.id)

    return ResponseSchema(
        status="success",
        message="Task updated successfully",
        data=tree.model_dump(mode="json"),
    )


@router.delete("/{task_id}", response_model=ResponseSchema)
async def delete_task(
    task_id: UUID = Path(..., description="Task ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a specific task and all its subtasks."""
    deleted = await TaskService(db).delete_task(task_id, current_user.id)

    return ResponseSchema(
        status="success",
        message="Task deleted successfully",
        data={"deleted_count": deleted},
    )


@router.post("/{task_id}/schedule-suggestion", response_model=ResponseSchema)
async def suggest_schedule(
    task_id: UUID = Path(..., description="Task ID"),
    payload: ScheduleSuggestionRequest | None = Body(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Suggest a time slot for a task."""
    suggestion = await SchedulingService(db).suggest_for_task(
        task_id, current_user.id, payload or ScheduleSuggestionRequest()
    )

    return ResponseSchema(
        status="success",
        message="Schedule suggestion generated successfully",
        data=ScheduleSuggestionResponse.model_validate(suggestion).model_dump(mode="json"),
    )
