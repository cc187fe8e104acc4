"""Project analytics schemas."""

from typing import Any

from pydantic import Field

from .ai import TimeOptimization
from .base import BaseSchema
from .scheduling import CalendarEventSchema


class ProjectAnalyticsRequest(BaseSchema):
    calendar_events: list[CalendarEventSchema] = Field(default_factory=list)


class ProjectAnalyticsResponse(BaseSchema):
    completion_rate: int
    time_efficiency: int
    risk_level: str
    days_remaining: int
    optimized_schedule: list[dict[str, Any]] = []
    critical_path: list[str] = []
    risk_assessment: list[Any] = []
    efficiency_suggestions: list[str] = []
    time_optimization: TimeOptimization = Field(default_factory=TimeOptimization)
    productivity_patterns: list[str] = []
    completion_trends: dict[str, Any] = {}
