# ruff: noqa: D107
"""AI service exceptions."""

from typing import Any

from .base import BaseAppException


class AIServiceError(BaseAppException):
    """Base exception for AI service errors."""

    def __init__(
        self,
        message: str = "AI service error occurred",
        error_code: str = "AI_SERVICE_ERROR",
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        super().__init__(message, status_code, error_code, details)


class AIServiceUnavailableError(AIServiceError):
    """Exception raised when AI service is unavailable."""

    def __init__(
        self,
        message: str = "AI service is temporarily unavailable",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_SERVICE_UNAVAILABLE", details, status_code=503)


class AIQuotaExceededError(AIServiceError):
    """Exception raised when AI service quota is exceeded."""

    def __init__(
        self,
        message: str = "AI service quota exceeded",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_QUOTA_EXCEEDED", details, status_code=429)


class AITimeoutError(AIServiceError):
    """Exception raised when AI service request times out."""

    def __init__(
        self,
        message: str = "AI service request timed out",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_TIMEOUT", details, status_code=504)


class AIParsingError(AIServiceError):
    """Exception raised when AI response cannot be parsed."""

    def __init__(
        self,
        message: str = "Failed to parse AI service response",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_PARSING_ERROR", details)


class AIContentFilterError(AIServiceError):
    """Exception raised when content is blocked by AI safety filters."""

    def __init__(
        self,
        message: str = "Content was blocked by AI safety filters",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_CONTENT_FILTERED", details, status_code=400)


class AIRateLimitError(AIServiceError):
    """Exception raised when AI service rate limit is hit."""

    def __init__(
        self,
        message: str = "AI service rate limit exceeded",
        retry_after: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        if details is None:
            details = {}
        if retry_after:
            details["retry_after"] = retry_after
        super().__init__(message, "AI_RATE_LIMITED", details, status_code=429)


class ProjectAnalyticsError(BaseAppException):
    """Raised when project analytics cannot be produced."""

    def __init__(
        self,
        message: str = "Failed to generate project analytics",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message, status_code=500, error_code="ANALYTICS_FAILED", details=details
        )
