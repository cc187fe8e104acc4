"""Category service layer with business logic."""

import logging
from uuid import UUID

from sqlalchemy import and_, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.exceptions.base import BadRequestError
from app.exceptions.category import (
    CategoryInUseError,
    CategoryNotFoundError,
    DefaultCategoryDeletionError,
)
from app.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate, ScheduleWindow
from models import Category, CategorySchedule, Task

logger = logging.getLogger(__name__)


class CategoryService:
    """Service class for category business logic."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_categories(self, user_id: UUID) -> list[CategoryResponse]:
        """Get the caller's categories, default first then by name."""
        query = (
            select(Category)
            .options(selectinload(Category.schedules))
            .where(Category.user_id == user_id)
            .order_by(Category.is_default.desc(), Category.name.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        categories = result.scalars().all()

        counts = await self._get_task_counts([c.id for c in categories])
        return [CategoryResponse.from_category(c, counts.get(c.id, 0)) for c in categories]

    async def get_category(self, category_id: UUID, user_id: UUID) -> CategoryResponse:
        category = await self._get_category_by_id_and_user(category_id, user_id, with_schedules=True)
        if not category:
            raise CategoryNotFoundError()
        counts = await self._get_task_counts([category.id])
        return CategoryResponse.from_category(category, counts.get(category.id, 0))

    async def create_category(self, category_data: CategoryCreate, user_id: UUID) -> CategoryResponse:
        """Create a category together with its schedules."""
        category = Category(
            user_id=user_id,
            name=category_data.name,
            color=category_data.color,
            description=category_data.description,
        )

        try:
            self.db.add(category)
            await self.db.flush()
            self._add_schedules(category.id, category_data.schedules)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise BadRequestError(f"Failed to create category: {str(e)}")

        logger.info(f"Created category {category.id} for user {user_id}")
        return await self.get_category(category.id, user_id)

    async def update_category(
        self, category_id: UUID, category_data: CategoryUpdate, user_id: UUID
    ) -> CategoryResponse:
        """Update a category and replace its schedule set."""
        category = await self._get_category_by_id_and_user(category_id, user_id)
        if not category:
            raise CategoryNotFoundError()

        category.name = category_data.name
        category.color = category_data.color
        category.description = category_data.description

        try:
            await self.db.execute(
                delete(CategorySchedule).where(CategorySchedule.category_id == category.id)
            )
            self._add_schedules(category.id, category_data.schedules)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise BadRequestError(f"Failed to update category: {str(e)}")

        return await self.get_category(category.id, user_id)

    async def delete_category(self, category_id: UUID, user_id: UUID) -> bool:
        """Delete a category that is neither default nor in use."""
        category = await self._get_category_by_id_and_user(category_id, user_id)
        if not category:
            raise CategoryNotFoundError()

        if category.is_default:
            raise DefaultCategoryDeletionError()

        counts = await self._get_task_counts([category.id])
        if counts.get(category.id, 0) > 0:
            raise CategoryInUseError()

        try:
            await self.db.execute(
                delete(CategorySchedule).where(CategorySchedule.category_id == category.id)
            )
            await self.db.execute(delete(Category).where(Category.id == category.id))
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise BadRequestError(f"Failed to delete category: {str(e)}")

    # Private helper methods

    async def _get_category_by_id_and_user(
        self, category_id: UUID, user_id: UUID, with_schedules: bool = False
    ) -> Category | None:
        query = select(Category).where(
            and_(Category.id == category_id, Category.user_id == user_id)
        )
        if with_schedules:
            query = query.options(selectinload(Category.schedules)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_task_counts(self, category_ids: list[UUID]) -> dict[UUID, int]:
        if not category_ids:
            return {}
        query = (
            select(Task.category_id, func.count(Task.id))
            .where(Task.category_id.in_(category_ids))
            .group_by(Task.category_id)
        )
        result = await self.db.execute(query)
        return {category_id: count for category_id, count in result.all()}

    def _add_schedules(self, category_id: UUID, schedules: list[ScheduleWindow]) -> None:
        for window in schedules:
            self.db.add(
                CategorySchedule(
                    category_id=category_id,
                    day_of_week=window.day_of_week,
                    start_hour=window.start_hour,
                    end_hour=window.end_hour,
                    is_active=window.is_active,
                )
            )
