"""Notification service layer."""

from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.base import NotFoundError
from models import Notification


class NotificationService:
    """Read access to the notifications created by the batch jobs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_notifications(self, user_id: UUID, unread_only: bool = False) -> list[Notification]:
        """Get the caller's notifications, newest first."""
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def mark_as_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        query = select(Notification).where(
            and_(Notification.id == notification_id, Notification.user_id == user_id)
        )
        result = await self.db.execute(query)
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotFoundError("Notification not found")

        notification.is_read = True
        await self.db.commit()
        await self.db.refresh(notification)
        return notification
