"""Unit tests for CategoryService."""

import uuid

import pytest
from sqlalchemy import func, select

from app.domains.category.service import CategoryService
from app.exceptions.category import (
    CategoryInUseError,
    CategoryNotFoundError,
    DefaultCategoryDeletionError,
)
from app.schemas.category import CategoryCreate, CategoryUpdate, ScheduleWindow
from models import Category, CategorySchedule, Task


class TestCategoryService:
    """Test cases for CategoryService."""

    @pytest.mark.asyncio
    async def test_create_category_with_schedules(self, test_db, test_user):
        """Schedules are stored with the category and returned sorted."""
        service = CategoryService(test_db)
        data = CategoryCreate(
            name="  Fitness ",
            color="",
            schedules=[
                ScheduleWindow(day_of_week=6, start_hour=8, end_hour=10),
                ScheduleWindow(day_of_week=2, start_hour=18, end_hour=20),
            ],
        )

        category = await service.create_category(data, test_user.id)

        assert category.name == "Fitness"
        assert category.color == "#007AFF"
        assert category.is_default is False
        assert category.task_count == 0
        assert [s.day_of_week for s in category.schedules] == [2, 6]
        assert all(s.category_id == category.id for s in category.schedules)

    @pytest.mark.asyncio
    async def test_get_categories_orders_default_first(self, test_db, test_user, test_user_2):
        """The default category leads; the rest are sorted by name."""
        test_db.add_all(
            [
                Category(user_id=test_user.id, name="Zeta"),
                Category(user_id=test_user.id, name="Alpha"),
                Category(user_id=test_user.id, name="Personal", is_default=True),
                Category(user_id=test_user_2.id, name="Hidden"),
            ]
        )
        await test_db.commit()
        service = CategoryService(test_db)

        categories = await service.get_categories(test_user.id)

        assert [c.name for c in categories] == ["Personal", "Alpha", "Zeta"]

    @pytest.mark.asyncio
    async def test_task_counts(self, test_db, test_user, test_category):
        test_db.add_all(
            [
                Task(user_id=test_user.id, title="One", category_id=test_category.id),
                Task(user_id=test_user.id, title="Two", category_id=test_category.id),
            ]
        )
        await test_db.commit()
        service = CategoryService(test_db)

        category = await service.get_category(test_category.id, test_user.id)

        assert category.task_count == 2
        assert len(category.schedules) == 5

    @pytest.mark.asyncio
    async def test_update_replaces_schedules(self, test_db, test_user, test_category):
        """Updating a category swaps its whole schedule set."""
        service = CategoryService(test_db)
        data = CategoryUpdate(
            name="Deep work",
            color="#00FF00",
            schedules=[ScheduleWindow(day_of_week=0, start_hour=10, end_hour=12)],
        )

        category = await service.update_category(test_category.id, data, test_user.id)

        assert category.name == "Deep work"
        assert category.color == "#00FF00"
        assert [(s.day_of_week, s.start_hour, s.end_hour) for s in category.schedules] == [(0, 10, 12)]
        count = await test_db.execute(select(func.count()).select_from(CategorySchedule))
        assert count.scalar() == 1

    @pytest.mark.asyncio
    async def test_get_other_users_category(self, test_db, test_user_2, test_category):
        service = CategoryService(test_db)

        with pytest.raises(CategoryNotFoundError):
            await service.get_category(test_category.id, test_user_2.id)

    @pytest.mark.asyncio
    async def test_delete_category(self, test_db, test_user, test_category):
        """Deleting removes the category and its schedules."""
        service = CategoryService(test_db)

        assert await service.delete_category(test_category.id, test_user.id) is True

        categories = await test_db.execute(select(func.count()).select_from(Category))
        schedules = await test_db.execute(select(func.count()).select_from(CategorySchedule))
        assert categories.scalar() == 0
        assert schedules.scalar() == 0

    @pytest.mark.asyncio
    async def test_delete_default_category(self, test_db, test_user):
        category = Category(user_id=test_user.id, name="Personal", is_default=True)
        test_db.add(category)
        await test_db.commit()
        service = CategoryService(test_db)

        with pytest.raises(DefaultCategoryDeletionError):
            await service.delete_category(category.id, test_user.id)

    @pytest.mark.asyncio
    async def test_delete_category_in_use(self, test_db, test_user, test_category):
        """A category with tasks cannot be deleted."""
        test_db.add(Task(user_id=test_user.id, title="Busy", category_id=test_category.id))
        await test_db.commit()
        service = CategoryService(test_db)

        with pytest.raises(CategoryInUseError):
            await service.delete_category(test_category.id, test_user.id)

    @pytest.mark.asyncio
    async def test_delete_missing_category(self, test_db, test_user):
        service = CategoryService(test_db)

        with pytest.raises(CategoryNotFoundError):
            await service.delete_category(uuid.uuid4(), test_user.id)
