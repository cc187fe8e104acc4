"""Notification API controller."""

from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, get_db, get_identity
from app.domains.notification.service import NotificationService
from app.schemas.base import ResponseSchema
from app.schemas.notification import NotificationResponse
from models import User

router = APIRouter(
    prefix="/api/notifications",
    tags=["notifications"],
    dependencies=[Depends(get_identity)],
)


@router.get("", response_model=ResponseSchema)
async def get_notifications(
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the caller's notifications, newest first."""
    notifications = await NotificationService(db).get_notifications(current_user.id, unread_only)

    return ResponseSchema(
        status="success",
        message="Notifications retrieved successfully",
        data=[NotificationResponse.model_validate(n).model_dump(mode="json") for n in notifications],
    )


@router.patch("/{notification_id}/read", response_model=ResponseSchema)
async def mark_notification_read(
    notification_id: UUID = Path(..., description="Notification ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Mark one notification as read."""
    notification = await NotificationService(db).mark_as_read(notification_id, current_user.id)

    return ResponseSchema(
        status="success",
        message="Notification marked as read",
        data=NotificationResponse.model_validate(notification).model_dump(mode="json"),
    )
