"""Celery tasks for the daily batch jobs."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import all models to ensure they're registered before creating session
import models  # noqa: F401

from app.celery_app import celery_app
from app.core.config import settings
from app.domains.ai.service import AIGateway
from app.domains.cron.service import BatchJobService

logger = logging.getLogger(__name__)

BatchJob = Callable[[BatchJobService], Awaitable[dict[str, Any]]]


async def _run_batch_job(job: BatchJob) -> dict[str, Any]:
    """Run one batch job on a fresh engine bound to the current event loop."""
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with session_maker() as session:
            service = BatchJobService(session, AIGateway(settings))
            return await job(service)
    finally:
        await engine.dispose()


@celery_app.task(name="app.tasks.batch_tasks.daily_assessment_task", bind=True)
def daily_assessment_task(self) -> dict[str, Any]:
    """Run the daily assessment for every user.

    Returns:
        Dictionary with task execution statistics
    """
    logger.info(f"Starting daily assessment task (Task ID: {self.request.id})")

    try:
        result = asyncio.run(_run_batch_job(lambda service: service.run_daily_assessment()))
        logger.info(f"Daily assessment task completed: {result}")
        return result

    except Exception as e:
        # No retry: users processed before the failure are already committed
        logger.error(f"Daily assessment task failed: {str(e)}")
        raise


@celery_app.task(name="app.tasks.batch_tasks.dependency_check_task", bind=True)
def dependency_check_task(self) -> dict[str, Any]:
    """Run the dependency check for every user.

    Returns:
        Dictionary with task execution statistics
    """
    logger.info(f"Starting dependency check task (Task ID: {self.request.id})")

    try:
        result = asyncio.run(_run_batch_job(lambda service: service.run_dependency_check()))
        logger.info(f"Dependency check task completed: {result}")
        return result

    except Exception as e:
        logger.error(f"Dependency check task failed: {str(e)}")
        raise
