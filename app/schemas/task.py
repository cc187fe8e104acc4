"""Task schemas for request/response serialization."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator

from models.task import Priority, TaskStatus

from .base import BaseModelSchema, BaseSchema
from .category import CategoryBrief


def _clean_tags(v: Any) -> list[str]:
    if not isinstance(v, list):
        return []
    return [t for t in v if isinstance(t, str)]


class SubtaskDraft(BaseSchema):
    """Subtask proposed by the creation wizard, created with its parent."""

    title: str = Field(..., max_length=500)
    description: str | None = None
    suggested_due_date: datetime | None = None
    estimated_time: int | None = Field(None, ge=0)
    priority: Priority = Priority.LOW

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Subtask title is required")
        return v.strip()

    @field_validator("priority", mode="before")
    @classmethod
    def map_draft_priority(cls, v: Any) -> Priority:
        # Drafts use lower-case "high"/"medium"/"low" from the AI review
        if isinstance(v, str):
            try:
                return Priority(v.upper())
            except ValueError:
                return Priority.LOW
        return Priority.LOW if v is None else v


class TaskCreate(BaseSchema):
    """Schema for creating a new task."""

    title: str = Field(..., max_length=500)
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    category_id: UUID | None = None
    parent_id: UUID | None = None
    responsible_party: str | None = Field(None, max_length=255)
    tags: list[str] = Field(default_factory=list)
    estimated_time: int | None = Field(None, ge=0)
    is_recurring: bool = False
    recurrence_rule: str | None = Field(None, max_length=255)
    success_criteria: str | None = None
    ai_suggestions: dict[str, Any] | None = None
    selected_suggestions: list[Any] | None = None
    subtasks: list[SubtaskDraft] | None = None
    dependency_ids: list[UUID] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> list[str]:
        return _clean_tags(v)


class TaskUpdate(BaseSchema):
    """Schema for updating a task. Only supplied fields are applied."""

    title: str | None = Field(None, max_length=500)
    description: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    due_date: datetime | None = None
    category_id: UUID | None = None
    parent_id: UUID | None = None
    responsible_party: str | None = Field(None, max_length=255)
    tags: list[str] | None = None
    estimated_time: int | None = Field(None, ge=0)
    actual_time: int | None = Field(None, ge=0)
    is_recurring: bool | None = None
    recurrence_rule: str | None = Field(None, max_length=255)
    success_criteria: str | None = None
    dependency_ids: list[UUID] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Title cannot be blank")
        return v.strip() if v is not None else None

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> list[str] | None:
        return None if v is None else _clean_tags(v)


class TaskBrief(BaseSchema):
    id: UUID
    title: str
    status: TaskStatus
    due_date: datetime | None = None


class TaskResponse(BaseModelSchema):
    """Schema for task response."""

    user_id: UUID
    parent_id: UUID | None = None
    category_id: UUID | None = None
    title: str
    description: str | None = None
    status: TaskStatus
    priority: Priority
    due_date: datetime | None = None
    completed_at: datetime | None = None
    estimated_time: int | None = None
    actual_time: int | None = None
    responsible_party: str | None = None
    tags: list[str] = []
    is_recurring: bool
    recurrence_rule: str | None = None
    next_occurrence: datetime | None = None
    success_criteria: str | None = None
    ai_suggestions: dict[str, Any] | None = None


class DependencyEdge(BaseSchema):
    id: UUID
    task_id: UUID
    dependency_id: UUID
    dependency: TaskBrief


class DependentEdge(BaseSchema):
    id: UUID
    task_id: UUID
    dependency_id: UUID
    dependent: TaskBrief


class SubtaskSummary(TaskResponse):
    category: CategoryBrief | None = None


class TaskListItem(TaskResponse):
    """Task with its category, direct subtasks and dependency edges."""

    category: CategoryBrief | None = None
    subtasks: list[SubtaskSummary] = []
    dependencies: list[DependencyEdge] = []
    dependents: list[DependentEdge] = []


class TaskTreeNode(TaskResponse):
    """Node of a task subtree read."""

    category: CategoryBrief | None = None
    dependency_ids: list[UUID] = []
    dependent_ids: list[UUID] = []
    blocked_by: list[TaskBrief] = []
    subtasks: list[TaskTreeNode] = []


class TaskFilter(BaseSchema):
    """Schema for filtering tasks."""

    status: TaskStatus | None = None
    category_id: UUID | None = None
    parent_id: UUID | None = None
    top_level_only: bool = False
    projects_only: bool = False


TaskTreeNode.model_rebuild()
