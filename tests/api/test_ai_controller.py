"""API tests for the AI controller."""

import pytest
from fastapi import status

from app.schemas.ai import ExpandedSubtask, TaskExpansionResult, TaskReviewResult


class TestAIController:
    """Test cases for AI API endpoints."""

    @pytest.mark.asyncio
    async def test_expand_task(self, authenticated_client, mock_ai_gateway):
        mock_ai_gateway.expand_task.return_value = TaskExpansionResult(
            subtasks=[ExpandedSubtask(title="Pick venue", estimated_time=60)],
            suggestions=["Book early"],
        )

        response = await authenticated_client.post(
            "/api/ai/expand-task",
            json={"task_title": " Plan party ", "existing_subtasks": ["Guest list"]},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["subtasks"][0]["title"] == "Pick venue"
        mock_ai_gateway.expand_task.assert_awaited_once_with("Plan party", None, ["Guest list"])

    @pytest.mark.asyncio
    async def test_expand_task_requires_title(self, authenticated_client, mock_ai_gateway):
        """A blank title is rejected before the gateway is called."""
        response = await authenticated_client.post("/api/ai/expand-task", json={"task_title": ""})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Task title is required"
        mock_ai_gateway.expand_task.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_task_assistance(self, authenticated_client, mock_ai_gateway):
        response = await authenticated_client.post(
            "/api/ai/task-assistance",
            json={"task_title": "Fix bike", "user_query": "Which tools?"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] == {
            "suggestions": [],
            "next_steps": [],
            "resources": [],
            "warnings": [],
        }

    @pytest.mark.asyncio
    async def test_task_review(self, authenticated_client, mock_ai_gateway):
        mock_ai_gateway.review_task_creation.return_value = TaskReviewResult(
            suggested_project_name="Kitchen refresh", complexity="high"
        )

        response = await authenticated_client.post(
            "/api/ai/task-review",
            json={
                "task_data": {"title": "Paint kitchen", "estimated_time": 240},
                "calendar_events": [
                    {"title": "Trip", "start": "2030-05-01T09:00:00", "end": "2030-05-03T18:00:00"}
                ],
            },
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["suggested_project_name"] == "Kitchen refresh"
        draft, events = mock_ai_gateway.review_task_creation.call_args.args
        assert draft == {"title": "Paint kitchen", "estimated_time": 240}
        assert events[0]["title"] == "Trip"

    @pytest.mark.asyncio
    async def test_context_questions(self, authenticated_client, mock_ai_gateway):
        mock_ai_gateway.generate_context_questions.return_value = ["What is the budget?"]

        response = await authenticated_client.post(
            "/api/ai/context-questions", json={"task_data": {"title": "Renovate"}}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] == {"questions": ["What is the budget?"]}

    @pytest.mark.asyncio
    async def test_context_questions_requires_title(self, authenticated_client):
        response = await authenticated_client.post(
            "/api/ai/context-questions", json={"task_data": {"description": "No title"}}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client):
        response = await client.post("/api/ai/expand-task", json={"task_title": "x"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
