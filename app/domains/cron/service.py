"""Batch jobs run once a day by an external cron trigger or Celery Beat."""

import json
import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.domains.ai.service import AIGateway
from models import (
    PENDING_STATUSES,
    Communication,
    CommunicationType,
    Notification,
    NotificationType,
    Task,
    TaskDependency,
    TaskStatus,
    User,
    utcnow,
)

logger = logging.getLogger(__name__)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


class BatchJobService:
    """Service for the daily assessment and dependency check jobs.

    Users are processed one after another; an error for one user aborts the
    remaining batch.
    """

    def __init__(self, db: AsyncSession, gateway: AIGateway):
        """Initialize batch job service.

        Args:
            db: Async database session
            gateway: AI gateway used for assessments and risk analysis
        """
        self.db = db
        self.gateway = gateway

    async def run_daily_assessment(self, now: datetime | None = None) -> dict[str, Any]:
        """Create a daily assessment notification and note for every user.

        Returns:
            Dictionary with summary of the run
        """
        today = start_of_day(now or utcnow())
        yesterday = today - timedelta(days=1)
        users = await self._get_users()

        logger.info(f"Starting daily assessment for {len(users)} users")
        stats = {"users_processed": 0, "notifications_created": 0}

        for user in users:
            completed = await self._titles(
                Task.user_id == user.id,
                Task.status == TaskStatus.COMPLETED,
                Task.completed_at >= yesterday,
                Task.completed_at < today,
            )
            pending = await self._titles(
                Task.user_id == user.id, Task.status.in_(PENDING_STATUSES)
            )
            overdue = await self._titles(
                Task.user_id == user.id,
                Task.status.in_(PENDING_STATUSES),
                Task.due_date < today,
            )

            assessment = await self.gateway.generate_daily_assessment(completed, pending, overdue)

            self.db.add(
                Notification(
                    user_id=user.id,
                    type=NotificationType.REMINDER,
                    title="Daily Task Assessment",
                    message=(
                        f"Today's plan: {', '.join(assessment.today_plan)}. "
                        f"Quick wins: {', '.join(assessment.quick_wins)}"
                    ),
                )
            )
            self.db.add(
                Communication(
                    user_id=user.id,
                    type=CommunicationType.NOTE,
                    subject="Daily AI Assessment",
                    content=json.dumps(assessment.model_dump()),
                )
            )
            await self.db.commit()

            stats["users_processed"] += 1
            stats["notifications_created"] += 1

        logger.info(f"Daily assessment complete: {stats}")
        return stats

    async def run_dependency_check(self, now: datetime | None = None) -> dict[str, Any]:
        """Alert users about blocked tasks due today and overdue blockers.

        Returns:
            Dictionary with summary of the run
        """
        today = start_of_day(now or utcnow())
        tomorrow = today + timedelta(days=1)
        users = await self._get_users()

        logger.info(f"Starting dependency check for {len(users)} users")
        stats = {"users_processed": 0, "notifications_created": 0}

        for user in users:
            created = 0

            result = await self.db.execute(
                select(Task)
                .options(selectinload(Task.dependencies).selectinload(TaskDependency.dependency))
                .where(
                    and_(
                        Task.user_id == user.id,
                        Task.status.in_(PENDING_STATUSES),
                        Task.due_date >= today,
                        Task.due_date < tomorrow,
                    )
                )
                .execution_options(populate_existing=True)
            )
            for task in result.scalars().all():
                incomplete = [
                    edge.dependency
                    for edge in task.dependencies
                    if edge.dependency.status != TaskStatus.COMPLETED
                ]
                if not incomplete:
                    continue

                titles = [dependency.title for dependency in incomplete]
                risks = await self.gateway.analyze_dependencies(str(task.id), task.title, titles)
                logger.debug(f"Dependency risks for task {task.id}: {risks}")

                self.db.add(
                    Notification(
                        user_id=user.id,
                        task_id=task.id,
                        type=NotificationType.DEPENDENCY,
                        title="Dependency Alert",
                        message=(
                            f'Task "{task.title}" is due today but depends on '
                            f"incomplete tasks: {', '.join(titles)}"
                        ),
                    )
                )
                created += 1

                dependents = await self._count_dependents(task)
                if dependents > 0:
                    self.db.add(
                        Notification(
                            user_id=user.id,
                            task_id=task.id,
                            type=NotificationType.DEPENDENCY,
                            title="Cascade Alert",
                            message=(
                                f'Completing "{task.title}" today will unblock '
                                f"{dependents} dependent tasks"
                            ),
                        )
                    )
                    created += 1

            result = await self.db.execute(
                select(Task)
                .options(selectinload(Task.dependents))
                .where(
                    and_(
                        Task.user_id == user.id,
                        Task.status.in_(PENDING_STATUSES),
                        Task.due_date < today,
                    )
                )
                .execution_options(populate_existing=True)
            )
            for task in result.scalars().all():
                if not task.dependents:
                    continue
                self.db.add(
                    Notification(
                        user_id=user.id,
                        task_id=task.id,
                        type=NotificationType.OVERDUE,
                        title="Overdue Task Blocking Others",
                        message=(
                            f'Overdue task "{task.title}" is blocking '
                            f"{len(task.dependents)} other tasks"
                        ),
                    )
                )
                created += 1

            await self.db.commit()
            stats["users_processed"] += 1
            stats["notifications_created"] += created

        logger.info(f"Dependency check complete: {stats}")
        return stats

    async def _get_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def _titles(self, *conditions) -> list[str]:
        result = await self.db.execute(select(Task.title).where(and_(*conditions)))
        return list(result.scalars().all())

    async def _count_dependents(self, task: Task) -> int:
        result = await self.db.execute(
            select(func.count(TaskDependency.id))
            .join(Task, Task.id == TaskDependency.task_id)
            .where(and_(TaskDependency.dependency_id == task.id, Task.user_id == task.user_id))
        )
        return result.scalar_one()
