"""Analytics API controller with FastAPI endpoints."""

from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_ai_gateway, get_current_user, get_db, get_identity
from app.domains.ai.service import AIGateway
from app.domains.analytics.service import AnalyticsService
from app.schemas.analytics import ProjectAnalyticsRequest
from app.schemas.base import ResponseSchema
from models import User

router = APIRouter(
    prefix="/api/analytics",
    tags=["analytics"],
    dependencies=[Depends(get_identity)],  # Global token validation for all routes
)


@router.post("/project/{project_id}", response_model=ResponseSchema)
async def project_analytics(
    project_id: UUID = Path(..., description="Project (top-level task) ID"),
    payload: ProjectAnalyticsRequest | None = Body(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: AIGateway = Depends(get_ai_gateway),
):
    """Completion metrics and AI analysis of a project."""
    analytics = await AnalyticsService(db, gateway).get_project_analytics(
        project_id,
        current_user.id,
        calendar_events=payload.calendar_events if payload else None,
    )

    return ResponseSchema(
        status="success",
        message="Project analytics generated successfully",
        data=analytics.model_dump(mode="json"),
    )
