"""
Task and dependency models.

A Task is a node of a self-referential tree: a task without a parent is a
"project", a task with a parent is a subtask. Dependencies are a separate
many-to-many edge table on Task (``task_id`` depends on ``dependency_id``).
"""

import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import backref, relationship

from .base import UUID, BaseModel


class TaskStatus(str, enum.Enum):
    """Task status enumeration."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Priority(str, enum.Enum):
    """Task priority enumeration."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


PENDING_STATUSES = (TaskStatus.TODO, TaskStatus.IN_PROGRESS)


class Task(BaseModel):
    __tablename__ = "tasks"

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(UUID(), ForeignKey("tasks.id", ondelete="CASCADE"), index=True)
    category_id = Column(UUID(), ForeignKey("categories.id", ondelete="SET NULL"), index=True)

    title = Column(String(500), nullable=False)
    description = Column(Text)
    status = Column(Enum(TaskStatus, name="task_status"), default=TaskStatus.TODO, nullable=False)
    priority = Column(Enum(Priority, name="task_priority"), default=Priority.MEDIUM, nullable=False)
    due_date = Column(DateTime)
    completed_at = Column(DateTime)
    estimated_time = Column(Integer)  # minutes
    actual_time = Column(Integer)  # minutes
    responsible_party = Column(String(255))
    tags = Column(JSON, default=list, nullable=False)
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurrence_rule = Column(String(255))
    next_occurrence = Column(DateTime)
    success_criteria = Column(Text)
    ai_suggestions = Column(JSON)

    # Relationships
    user = relationship("User", back_populates="tasks")
    category = relationship("Category", back_populates="tasks")
    subtasks = relationship(
        "Task",
        backref=backref("parent", remote_side="Task.id"),
        foreign_keys=[parent_id],
        passive_deletes=True,
        order_by="Task.created_at",
    )
    dependencies = relationship(
        "TaskDependency",
        foreign_keys="TaskDependency.task_id",
        back_populates="dependent",
        passive_deletes=True,
    )
    dependents = relationship(
        "TaskDependency",
        foreign_keys="TaskDependency.dependency_id",
        back_populates="dependency",
        passive_deletes=True,
    )

    @property
    def is_project(self) -> bool:
        return self.parent_id is None


class TaskDependency(BaseModel):
    """Edge meaning ``task_id`` cannot finish before ``dependency_id``."""

    __tablename__ = "task_dependencies"
    __table_args__ = (UniqueConstraint("task_id", "dependency_id", name="uq_task_dependency"),)

    task_id = Column(UUID(), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    dependency_id = Column(
        UUID(), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )

    dependent = relationship("Task", foreign_keys=[task_id], back_populates="dependencies")
    dependency = relationship("Task", foreign_keys=[dependency_id], back_populates="dependents")
