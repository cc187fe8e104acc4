"""Task service layer with business logic."""

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import and_, delete, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.domains.task.tree import TaskArena, collect_subtree_ids, collect_subtree_levels
from app.exceptions.category import CategoryNotFoundError
from app.exceptions.task import (
    InvalidDependencyError,
    InvalidRecurrenceRuleError,
    InvalidTaskOperationError,
    MaxTaskDepthExceededError,
    TaskNotFoundError,
)
from app.schemas.task import TaskCreate, TaskFilter, TaskTreeNode, TaskUpdate
from app.shared.recurrence import calculate_next_occurrence
from models import (
    Category,
    Communication,
    Notification,
    Task,
    TaskDependency,
    TaskStatus,
    utcnow,
)

logger = logging.getLogger(__name__)

# Columns that may not be cleared with an explicit null
NON_NULLABLE_FIELDS = {"title", "status", "priority", "tags", "is_recurring"}


def list_options():
    """Eager loads for a task list item: category, direct subtasks and edges."""
    return (
        selectinload(Task.category),
        selectinload(Task.subtasks).selectinload(Task.category),
        selectinload(Task.dependencies).selectinload(TaskDependency.dependency),
        selectinload(Task.dependents).selectinload(TaskDependency.dependent),
    )


class TaskService:
    """Service class for task business logic."""

    def __init__(self, db: AsyncSession, max_depth: int | None = None):
        self.db = db
        self.max_depth = max_depth or settings.max_subtasks_depth

    async def get_tasks_list(self, user_id: UUID, filters: TaskFilter) -> list[Task]:
        """Get the caller's tasks with filters."""
        query = select(Task).options(*list_options()).where(Task.user_id == user_id)

        if filters.projects_only:
            query = query.where(Task.parent_id.is_(None))
        else:
            if filters.status:
                query = query.where(Task.status == filters.status)
            if filters.category_id:
                query = query.where(Task.category_id == filters.category_id)
            if filters.top_level_only:
                query = query.where(Task.parent_id.is_(None))
            elif filters.parent_id:
                query = query.where(Task.parent_id == filters.parent_id)

        query = query.order_by(Task.due_date.asc().nulls_last(), Task.created_at.desc())

        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def get_task(self, task_id: UUID, user_id: UUID) -> Task:
        """Get one task with its list-item relations loaded."""
        query = (
            select(Task)
            .options(*list_options())
            .where(and_(Task.id == task_id, Task.user_id == user_id))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        task = result.scalar_one_or_none()
        if not task:
            raise TaskNotFoundError()
        return task

    async def get_task_tree(self, task_id: UUID, user_id: UUID) -> TaskTreeNode:
        """Get a task with its subtree, dependency ids and blockers."""
        task = await self._get_task_by_id_and_user(task_id, user_id)
        if not task:
            raise TaskNotFoundError()

        result = await self.db.execute(
            select(Task)
            .options(selectinload(Task.category))
            .where(Task.id == task.id)
            .execution_options(populate_existing=True)
        )
        root = result.scalar_one()
        arena = await TaskArena.load(self.db, root, self.max_depth)
        return arena.to_tree()

    async def create_task(self, task_data: TaskCreate, user_id: UUID) -> Task:
        """Create a task, its drafted subtasks and its dependency edges."""
        depth = 0
        if task_data.parent_id:
            parent = await self._get_task_by_id_and_user(task_data.parent_id, user_id)
            if not parent:
                raise TaskNotFoundError("Parent task not found")
            depth = await self._get_task_depth(parent) + 1
            if depth > self.max_depth:
                raise MaxTaskDepthExceededError()
        if task_data.subtasks and depth + 1 > self.max_depth:
            raise MaxTaskDepthExceededError()

        if task_data.category_id:
            await self._validate_category_ownership(task_data.category_id, user_id)
        await self._validate_dependencies(task_data.dependency_ids, user_id)

        due_date = self._normalize_datetime(task_data.due_date)
        next_occurrence = self._next_occurrence(
            task_data.is_recurring, task_data.recurrence_rule, due_date
        )

        ai_suggestions = None
        if task_data.ai_suggestions is not None or task_data.selected_suggestions is not None:
            ai_suggestions = {
                **(task_data.ai_suggestions or {}),
                "selected_suggestions": task_data.selected_suggestions or [],
            }

        task = Task(
            user_id=user_id,
            parent_id=task_data.parent_id,
            category_id=task_data.category_id,
            title=task_data.title,
            description=task_data.description,
            status=task_data.status,
            priority=task_data.priority,
            due_date=due_date,
            completed_at=utcnow() if task_data.status == TaskStatus.COMPLETED else None,
            estimated_time=task_data.estimated_time,
            responsible_party=task_data.responsible_party,
            tags=task_data.tags,
            is_recurring=task_data.is_recurring,
            recurrence_rule=task_data.recurrence_rule,
            next_occurrence=next_occurrence,
            success_criteria=task_data.success_criteria,
            ai_suggestions=ai_suggestions,
        )

        try:
            self.db.add(task)
            await self.db.flush()

            for draft in task_data.subtasks or []:
                self.db.add(
                    Task(
                        user_id=user_id,
                        parent_id=task.id,
                        category_id=task_data.category_id,
                        title=draft.title,
                        description=draft.description,
                        priority=draft.priority,
                        due_date=self._normalize_datetime(draft.suggested_due_date),
                        estimated_time=draft.estimated_time,
                    )
                )
            for dependency_id in dict.fromkeys(task_data.dependency_ids):
                self.db.add(TaskDependency(task_id=task.id, dependency_id=dependency_id))

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InvalidTaskOperationError(f"Failed to create task: {str(e)}")

        logger.info(
            f"Created task {task.id} for user {user_id} "
            f"with {len(task_data.subtasks or [])} subtasks"
        )
        return await self.get_task(task.id, user_id)

    async def update_task(
        self, task_id: UUID, task_data: TaskUpdate, user_id: UUID
    ) -> TaskTreeNode:
        """Update the supplied fields of a task."""
        task = await self._get_task_by_id_and_user(task_id, user_id)
        if not task:
            raise TaskNotFoundError()

        update_data = task_data.model_dump(exclude_unset=True, exclude_none=False)
        dependency_ids = update_data.pop("dependency_ids", None)

        if update_data.get("parent_id") is not None:
            await self._validate_new_parent(task, update_data["parent_id"], user_id)
        if update_data.get("category_id") is not None:
            await self._validate_category_ownership(update_data["category_id"], user_id)
        if dependency_ids is not None:
            if task.id in dependency_ids:
                raise InvalidDependencyError()
            await self._validate_dependencies(dependency_ids, user_id)

        was_completed = task.status == TaskStatus.COMPLETED
        for field, value in update_data.items():
            if value is None and field in NON_NULLABLE_FIELDS:
                continue
            if field == "due_date":
                value = self._normalize_datetime(value)
            setattr(task, field, value)

        # Auto-set completed_at when status changes to COMPLETED
        if "status" in update_data and update_data["status"] is not None:
            if task.status == TaskStatus.COMPLETED:
                if not was_completed or task.completed_at is None:
                    task.completed_at = utcnow()
            else:
                task.completed_at = None

        if {"is_recurring", "recurrence_rule", "due_date"} & update_data.keys():
            task.next_occurrence = self._next_occurrence(
                task.is_recurring, task.recurrence_rule, task.due_date
            )

        try:
            if dependency_ids is not None:
                await self.db.execute(
                    delete(TaskDependency).where(TaskDependency.task_id == task.id)
                )
                for dependency_id in dict.fromkeys(dependency_ids):
                    self.db.add(TaskDependency(task_id=task.id, dependency_id=dependency_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InvalidTaskOperationError(f"Failed to update task: {str(e)}")

        return await self.get_task_tree(task.id, user_id)

    async def delete_task(self, task_id: UUID, user_id: UUID) -> int:
        """Delete a task, its whole subtree and every edge touching it.

        Returns the number of deleted tasks.
        """
        task = await self._get_task_by_id_and_user(task_id, user_id)
        if not task:
            raise TaskNotFoundError()

        ids = await collect_subtree_ids(self.db, task.id)
        try:
            await self.db.execute(
                delete(TaskDependency).where(
                    or_(
                        TaskDependency.task_id.in_(ids),
                        TaskDependency.dependency_id.in_(ids),
                    )
                )
            )
            await self.db.execute(delete(Notification).where(Notification.task_id.in_(ids)))
            await self.db.execute(delete(Communication).where(Communication.task_id.in_(ids)))
            await self.db.execute(delete(Task).where(Task.id.in_(ids)))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise InvalidTaskOperationError(f"Failed to delete task: {str(e)}")

        logger.info(f"Deleted task {task_id} and {len(ids) - 1} descendants")
        return len(ids)

    async def get_scheduling_context(
        self, task_id: UUID, user_id: UUID
    ) -> dict[str, Any]:
        """Duration, due date and active schedules used to place a task.

        Missing values fall back to the task's project (top-level ancestor).
        """
        task = await self._get_task_by_id_and_user(task_id, user_id)
        if not task:
            raise TaskNotFoundError()

        project = await self._get_project(task)
        due_date = task.due_date or (project.due_date if project else None)
        category_id = task.category_id or (project.category_id if project else None)

        schedules = []
        if category_id:
            result = await self.db.execute(
                select(Category)
                .options(selectinload(Category.schedules))
                .where(and_(Category.id == category_id, Category.user_id == user_id))
            )
            category = result.scalar_one_or_none()
            if category:
                schedules = [s for s in category.schedules if s.is_active]

        return {
            "task": task,
            "duration": task.estimated_time,
            "due_date": due_date,
            "schedules": schedules,
        }

    # Private helper methods

    async def _get_task_by_id_and_user(self, task_id: UUID, user_id: UUID) -> Task | None:
        """Get task by ID and user ID."""
        query = select(Task).where(and_(Task.id == task_id, Task.user_id == user_id))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_task_depth(self, task: Task) -> int:
        """Calculate the depth of a task in the hierarchy (projects are 0)."""
        depth = 0
        current = task
        seen = {task.id}

        while current.parent_id and current.parent_id not in seen:
            depth += 1
            seen.add(current.parent_id)
            result = await self.db.execute(select(Task).where(Task.id == current.parent_id))
            current = result.scalar_one_or_none()
            if not current:
                break

        return depth

    async def _get_project(self, task: Task) -> Task | None:
        """Top-level ancestor of a subtask, None for a project."""
        current = task
        seen = {task.id}
        while current.parent_id and current.parent_id not in seen:
            seen.add(current.parent_id)
            result = await self.db.execute(select(Task).where(Task.id == current.parent_id))
            parent = result.scalar_one_or_none()
            if not parent:
                break
            current = parent
        return current if current is not task else None

    async def _validate_new_parent(self, task: Task, parent_id: UUID, user_id: UUID) -> None:
        parent = await self._get_task_by_id_and_user(parent_id, user_id)
        if not parent:
            raise TaskNotFoundError("Parent task not found")

        levels = await collect_subtree_levels(self.db, task.id)
        if any(parent.id in level for level in levels):
            raise InvalidTaskOperationError("A task cannot be moved under its own subtree")
        # The deepest descendant moves along with the task
        if await self._get_task_depth(parent) + len(levels) > self.max_depth:
            raise MaxTaskDepthExceededError()

    async def _validate_category_ownership(self, category_id: UUID, user_id: UUID) -> None:
        query = select(Category.id).where(
            and_(Category.id == category_id, Category.user_id == user_id)
        )
        result = await self.db.execute(query)
        if result.scalar_one_or_none() is None:
            raise CategoryNotFoundError()

    async def _validate_dependencies(self, dependency_ids: list[UUID], user_id: UUID) -> None:
        if not dependency_ids:
            return
        query = select(Task.id).where(
            and_(Task.id.in_(dependency_ids), Task.user_id == user_id)
        )
        result = await self.db.execute(query)
        found = set(result.scalars().all())
        if found != set(dependency_ids):
            raise TaskNotFoundError("Dependency task not found")

    def _next_occurrence(
        self, is_recurring: bool, rule: str | None, due_date: datetime | None
    ) -> datetime | None:
        if not (is_recurring and rule):
            return None
        try:
            return calculate_next_occurrence(rule, due_date or utcnow())
        except ValueError as e:
            raise InvalidRecurrenceRuleError(str(e))

    def _normalize_datetime(self, dt: datetime | None) -> datetime | None:
        """Normalize datetime to naive UTC."""
        if dt is None:
            return None

        # If datetime is timezone-aware, convert to UTC
        if dt.tzinfo is not None:
            return dt.astimezone(UTC).replace(tzinfo=None)

        return dt
