"""Batch job triggers for an external scheduler."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_ai_gateway, get_db, verify_cron_secret
from app.domains.ai.service import AIGateway
from app.domains.cron.service import BatchJobService
from app.schemas.base import ResponseSchema

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/cron",
    tags=["cron"],
    dependencies=[Depends(verify_cron_secret)],
)


@router.get("/daily-assessment", response_model=ResponseSchema)
async def daily_assessment(
    db: AsyncSession = Depends(get_db),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    """Run the daily AI assessment for every user."""
    stats = await BatchJobService(db, gateway).run_daily_assessment()

    return ResponseSchema(
        status="success",
        message="Daily assessment completed successfully",
        data=stats,
    )


@router.get("/dependency-check", response_model=ResponseSchema)
async def dependency_check(
    db: AsyncSession = Depends(get_db),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    """Run the dependency check for every user."""
    stats = await BatchJobService(db, gateway).run_dependency_check()

    return ResponseSchema(
        status="success",
        message="Dependency check completed successfully",
        data=stats,
    )
