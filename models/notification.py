"""
Notification and communication models.

Both are append-only records written by the scheduled batch jobs.
"""

import enum

from sqlalchemy import Boolean, Column, Enum, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class NotificationType(str, enum.Enum):
    """Notification type enumeration."""

    REMINDER = "REMINDER"
    DEPENDENCY = "DEPENDENCY"
    OVERDUE = "OVERDUE"
    SYSTEM = "SYSTEM"


class CommunicationType(str, enum.Enum):
    """Communication channel enumeration."""

    EMAIL = "EMAIL"
    SMS = "SMS"
    SLACK = "SLACK"
    TEAMS = "TEAMS"
    NOTE = "NOTE"
    OTHER = "OTHER"


class Notification(BaseModel):
    __tablename__ = "notifications"

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(UUID(), ForeignKey("tasks.id", ondelete="CASCADE"), index=True)
    type = Column(Enum(NotificationType, name="notification_type"), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="notifications")


class Communication(BaseModel):
    __tablename__ = "communications"

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(UUID(), ForeignKey("tasks.id", ondelete="CASCADE"), index=True)
    type = Column(Enum(CommunicationType, name="communication_type"), nullable=False)
    subject = Column(String(255))
    content = Column(Text, nullable=False)

    user = relationship("User", back_populates="communications")
