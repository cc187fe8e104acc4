"""Notification schemas."""

from uuid import UUID

from models.notification import NotificationType

from .base import BaseModelSchema


class NotificationResponse(BaseModelSchema):
    user_id: UUID
    task_id: UUID | None = None
    type: NotificationType
    title: str
    message: str
    is_read: bool
