"""API tests for the category controller."""

import uuid

import pytest
from fastapi import status

from models import Task


class TestCategoryController:
    """Test cases for category API endpoints."""

    @pytest.mark.asyncio
    async def test_create_category(self, authenticated_client):
        category_data = {
            "name": "Errands",
            "color": "#00AAFF",
            "schedules": [
                {"day_of_week": 6, "start_hour": 9, "end_hour": 12},
                {"day_of_week": 0, "start_hour": 10, "end_hour": 14},
            ],
        }

        response = await authenticated_client.post("/api/categories", json=category_data)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "Category created successfully"
        assert data["data"]["name"] == "Errands"
        assert [s["day_of_week"] for s in data["data"]["schedules"]] == [0, 6]

    @pytest.mark.asyncio
    async def test_create_category_invalid_window(self, authenticated_client):
        """Weekdays outside 0-6 are rejected."""
        response = await authenticated_client.post(
            "/api/categories",
            json={"name": "Bad", "schedules": [{"day_of_week": 7, "start_hour": 9, "end_hour": 10}]},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_list_categories(self, authenticated_client, test_category):
        response = await authenticated_client.get("/api/categories")

        assert response.status_code == status.HTTP_200_OK
        [category] = response.json()["data"]
        assert category["name"] == "Work"
        assert len(category["schedules"]) == 5
        assert category["task_count"] == 0

    @pytest.mark.asyncio
    async def test_update_category(self, authenticated_client, test_category):
        response = await authenticated_client.put(
            f"/api/categories/{test_category.id}",
            json={"name": "Office", "schedules": []},
        )

        assert response.status_code == status.HTTP_200_OK
        category = response.json()["data"]
        assert category["name"] == "Office"
        assert category["color"] == "#007AFF"
        assert category["schedules"] == []

    @pytest.mark.asyncio
    async def test_delete_category(self, authenticated_client, test_category):
        response = await authenticated_client.delete(f"/api/categories/{test_category.id}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Category deleted successfully"

        response = await authenticated_client.get(f"/api/categories/{test_category.id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_category_in_use(self, authenticated_client, test_db, test_user, test_category):
        """Categories still holding tasks cannot be deleted."""
        test_db.add(Task(user_id=test_user.id, title="Filed", category_id=test_category.id))
        await test_db.commit()

        response = await authenticated_client.delete(f"/api/categories/{test_category.id}")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "CATEGORY_IN_USE"

    @pytest.mark.asyncio
    async def test_get_missing_category(self, authenticated_client):
        response = await authenticated_client.get(f"/api/categories/{uuid.uuid4()}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Category not found"
