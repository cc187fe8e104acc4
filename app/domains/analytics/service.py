"""Project analytics: local metrics plus AI intelligence and insights."""

import asyncio
import logging
import math
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.domains.ai.service import AIGateway
from app.exceptions.ai import AIServiceError, ProjectAnalyticsError
from app.exceptions.task import TaskNotFoundError
from app.schemas.analytics import ProjectAnalyticsResponse
from app.schemas.scheduling import CalendarEventSchema
from models import CategorySchedule, Priority, Task, TaskStatus, utcnow

logger = logging.getLogger(__name__)

# Incomplete URGENT subtasks above this count make a project high risk
HIGH_RISK_THRESHOLD = 2


def completion_rate(subtasks: list[Task]) -> int:
    if not subtasks:
        return 0
    completed = sum(1 for t in subtasks if t.status == TaskStatus.COMPLETED)
    return round(completed / len(subtasks) * 100)


def time_efficiency(subtasks: list[Task]) -> int:
    estimated = sum(t.estimated_time or 0 for t in subtasks)
    actual = sum(t.actual_time or 0 for t in subtasks)
    if estimated <= 0:
        return 100
    return round(estimated / max(actual, 1) * 100)


def risk_level(subtasks: list[Task]) -> str:
    urgent = sum(
        1
        for t in subtasks
        if t.priority == Priority.URGENT and t.status != TaskStatus.COMPLETED
    )
    if urgent > HIGH_RISK_THRESHOLD:
        return "High"
    if urgent > 0:
        return "Medium"
    return "Low"


def days_remaining(due_date: datetime | None, now: datetime | None = None) -> int:
    if due_date is None:
        return 0
    now = now or utcnow()
    return max(0, math.ceil((due_date - now).total_seconds() / 86400))


class AnalyticsService:
    """Service class for project analytics."""

    def __init__(self, db: AsyncSession, gateway: AIGateway):
        self.db = db
        self.gateway = gateway

    async def get_project_analytics(
        self,
        project_id: UUID,
        user_id: UUID,
        calendar_events: list[CalendarEventSchema] | None = None,
    ) -> ProjectAnalyticsResponse:
        """Compute metrics for a project and ask the AI gateway for analysis.

        Raises:
            TaskNotFoundError: If the project is absent or not owned
            ProjectAnalyticsError: If either AI analysis fails
        """
        project = await self._get_project(project_id, user_id)
        subtasks = list(project.subtasks)

        schedules = []
        if project.category_id:
            result = await self.db.execute(
                select(CategorySchedule).where(
                    CategorySchedule.category_id == project.category_id
                )
            )
            schedules = result.scalars().all()

        project_data = {
            "title": project.title,
            "due_date": project.due_date.isoformat() if project.due_date else "",
            "tasks": [
                {
                    "title": t.title,
                    "estimated_time": t.estimated_time or 0,
                    "priority": t.priority.value,
                    "dependencies": [str(d.dependency_id) for d in t.dependencies],
                }
                for t in subtasks
            ],
            "category_schedules": [
                {"day_of_week": s.day_of_week, "start_hour": s.start_hour, "end_hour": s.end_hour}
                for s in schedules
            ],
            "calendar_events": [e.model_dump(mode="json") for e in calendar_events or []],
        }

        try:
            intelligence, insights = await asyncio.gather(
                self.gateway.analyze_project_intelligence(project_data),
                self.gateway.generate_project_insights(
                    str(project.id), [self._task_snapshot(t) for t in subtasks]
                ),
            )
        except AIServiceError as e:
            logger.error(f"Error generating project analytics for {project_id}: {e.message}")
            details = None if settings.is_production else {"error": e.message}
            raise ProjectAnalyticsError(details=details) from e

        return ProjectAnalyticsResponse(
            completion_rate=completion_rate(subtasks),
            time_efficiency=time_efficiency(subtasks),
            risk_level=risk_level(subtasks),
            days_remaining=days_remaining(project.due_date),
            optimized_schedule=intelligence.optimized_schedule,
            critical_path=intelligence.critical_path,
            risk_assessment=intelligence.risk_assessment,
            efficiency_suggestions=intelligence.efficiency_suggestions,
            time_optimization=intelligence.time_optimization,
            productivity_patterns=insights.productivity_patterns,
            completion_trends=insights.completion_trends,
        )

    async def _get_project(self, project_id: UUID, user_id: UUID) -> Task:
        query = (
            select(Task)
            .options(selectinload(Task.subtasks).selectinload(Task.dependencies))
            .where(and_(Task.id == project_id, Task.user_id == user_id))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        project = result.scalar_one_or_none()
        if not project:
            raise TaskNotFoundError("Project not found")
        return project

    @staticmethod
    def _task_snapshot(task: Task) -> dict[str, Any]:
        return {
            "title": task.title,
            "status": task.status.value,
            "priority": task.priority.value,
            "estimated_time": task.estimated_time,
            "actual_time": task.actual_time,
            "due_date": task.due_date,
            "completed_at": task.completed_at,
        }
