"""Unit tests for the application exception hierarchy."""

from app.exceptions.ai import AIRateLimitError, AIServiceUnavailableError, ProjectAnalyticsError
from app.exceptions.base import (
    BaseAppException,
    UnauthorizedError,
    UserProfileNotFoundError,
    ValidationError,
)
from app.exceptions.category import CategoryInUseError
from app.exceptions.scheduling import NoAvailableSlotsError, SchedulingInputError
from app.exceptions.task import MaxTaskDepthExceededError, TaskNotFoundError


class TestExceptions:
    def test_base_exception_detail(self):
        """The HTTP detail carries message, code and details."""
        exc = BaseAppException("Broken", status_code=418, error_code="TEAPOT", details={"a": 1})

        assert exc.status_code == 418
        assert exc.detail == {"message": "Broken", "error_code": "TEAPOT", "details": {"a": 1}}

    def test_status_codes(self):
        assert ValidationError().status_code == 400
        assert UnauthorizedError().status_code == 401
        assert UnauthorizedError().headers == {"WWW-Authenticate": "Bearer"}
        assert TaskNotFoundError().status_code == 404
        assert NoAvailableSlotsError().status_code == 409
        assert AIServiceUnavailableError().status_code == 503
        assert ProjectAnalyticsError().status_code == 500

    def test_error_codes(self):
        assert UserProfileNotFoundError().detail["message"] == "User profile not found"
        assert UserProfileNotFoundError().error_code == "NOT_FOUND"
        assert MaxTaskDepthExceededError().error_code == "MAX_TASK_DEPTH_EXCEEDED"
        assert SchedulingInputError("Task has no due date").error_code == "SCHEDULING_INPUT_ERROR"
        assert CategoryInUseError().status_code == 400

    def test_rate_limit_carries_retry_after(self):
        exc = AIRateLimitError(retry_after=30)

        assert exc.status_code == 429
        assert exc.detail["details"]["retry_after"] == 30
