"""
Models package initialization.
"""

from .base import Base, BaseModel, utcnow
from .category import Category, CategorySchedule
from .notification import Communication, CommunicationType, Notification, NotificationType
from .task import PENDING_STATUSES, Priority, Task, TaskDependency, TaskStatus
from .user import User

__all__ = [
    "Base",
    "BaseModel",
    "utcnow",
    "User",
    "Task",
    "TaskDependency",
    "TaskStatus",
    "Priority",
    "PENDING_STATUSES",
    "Category",
    "CategorySchedule",
    "Notification",
    "NotificationType",
    "Communication",
    "CommunicationType",
]
