"""Category schemas for request/response serialization."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseModelSchema, BaseSchema


class ScheduleWindow(BaseSchema):
    """Weekly availability window, 0 = Sunday ... 6 = Saturday."""

    day_of_week: int = Field(..., ge=0, le=6)
    start_hour: int = Field(..., ge=0, le=24)
    end_hour: int = Field(..., ge=0, le=24)
    is_active: bool = True


class ScheduleResponse(ScheduleWindow):
    id: UUID
    category_id: UUID


class CategoryBase(BaseSchema):
    """Base category schema with common fields."""

    name: str = Field(..., max_length=255)
    color: str = Field(default="#007AFF", max_length=20)
    description: str | None = None
    schedules: list[ScheduleWindow] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None

    @field_validator("color", mode="before")
    @classmethod
    def default_color(cls, v):
        return v or "#007AFF"


class CategoryCreate(CategoryBase):
    """Schema for creating a category together with its schedules."""


class CategoryUpdate(CategoryBase):
    """Schema for replacing a category and its schedule set."""


class CategoryBrief(BaseSchema):
    id: UUID
    name: str
    color: str


class CategoryResponse(BaseModelSchema):
    """Schema for category response."""

    user_id: UUID
    name: str
    color: str
    description: str | None = None
    is_default: bool
    schedules: list[ScheduleResponse] = []
    task_count: int = 0

    @classmethod
    def from_category(cls, category, task_count: int = 0) -> CategoryResponse:
        response = cls.model_validate(category)
        response.schedules.sort(key=lambda s: (s.day_of_week, s.start_hour))
        response.task_count = task_count
        return response
