"""AI-related Pydantic schemas for request/response validation."""

from typing import Any

from pydantic import ConfigDict, Field

from .base import BaseSchema
from .scheduling import CalendarEventSchema


# Request schemas
class ExpandTaskRequest(BaseSchema):
    """Schema for breaking a task down into subtasks."""

    task_title: str | None = Field(None, max_length=500)
    task_description: str | None = None
    existing_subtasks: list[str] | None = None


class TaskAssistanceRequest(BaseSchema):
    """Schema for free-form help with a task."""

    task_title: str | None = Field(None, max_length=500)
    task_description: str | None = None
    user_query: str | None = None
    project_context: str | None = None


class TaskDraft(BaseSchema):
    """Task as typed into the creation wizard, before it is saved."""

    model_config = ConfigDict(from_attributes=True, extra="allow")

    title: str | None = None
    description: str | None = None
    due_date: str | None = None
    priority: str | None = None
    category: str | None = None
    estimated_time: int | None = None
    responsible_party: str | None = None
    success_criteria: str | None = None


class TaskReviewRequest(BaseSchema):
    task_data: TaskDraft
    calendar_events: list[CalendarEventSchema] = Field(default_factory=list)


class ContextQuestionsRequest(BaseSchema):
    task_data: TaskDraft


# Result schemas
class ExpandedSubtask(BaseSchema):
    title: str
    description: str | None = None
    estimated_time: int | None = None


class TaskExpansionResult(BaseSchema):
    subtasks: list[ExpandedSubtask] = []
    dependencies: list[str] = []
    suggestions: list[str] = []


class DailyAssessmentResult(BaseSchema):
    today_plan: list[str] = []
    quick_wins: list[str] = []
    risks: list[str] = []
    suggestions: list[str] = []


class TaskAssistanceResult(BaseSchema):
    suggestions: list[str] = []
    next_steps: list[str] = []
    resources: list[str] = []
    warnings: list[str] = []


class RecommendedSubtask(BaseSchema):
    title: str
    description: str | None = None
    estimated_time: int | None = None
    priority: str = "medium"
    suggested_due_date: str | None = None


class TaskReviewResult(BaseSchema):
    suggested_project_name: str = ""
    suggestions: list[str] = []
    clarifying_questions: list[str] = []
    estimated_duration: int = 0
    complexity: str = "medium"
    recommended_subtasks: list[RecommendedSubtask] = []
    risks: list[str] = []
    calendar_conflicts: list[str] = []
    tools_and_supplies: list[str] = []


class ContextQuestionsResult(BaseSchema):
    questions: list[str] = []


class TimeOptimization(BaseSchema):
    time_saved: int = 0
    recommendations: list[str] = []


class ProjectIntelligenceResult(BaseSchema):
    optimized_schedule: list[dict[str, Any]] = []
    critical_path: list[str] = []
    risk_assessment: list[Any] = []
    efficiency_suggestions: list[str] = []
    time_optimization: TimeOptimization = Field(default_factory=TimeOptimization)


class ProjectInsightsResult(BaseSchema):
    productivity_patterns: list[str] = []
    completion_trends: dict[str, Any] = {}
