# ruff: noqa: D107
"""Base exception classes."""

from typing import Any

from fastapi import HTTPException


class BaseAppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={"message": message, "error_code": error_code, "details": details},
        )


class BadRequestError(BaseAppException):
    """Exception raised when a request is malformed or violates a business rule."""

    def __init__(
        self,
        message: str = "Bad request",
        error_code: str = "BAD_REQUEST",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=400, error_code=error_code, details=details)


class ValidationError(BadRequestError):
    """Exception raised when validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, error_code="VALIDATION_ERROR", details=details)


class UnauthorizedError(BaseAppException):
    """Exception raised when the caller cannot be authenticated."""

    def __init__(
        self,
        message: str = "Unauthorized",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message, status_code=401, error_code="UNAUTHORIZED", details=details
        )
        self.headers = {"WWW-Authenticate": "Bearer"}


class NotFoundError(BaseAppException):
    """Exception raised when a resource is not found."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=404, error_code="NOT_FOUND", details=details)


class ConflictError(BaseAppException):
    """Exception raised when a request cannot be satisfied in the current state."""

    def __init__(
        self,
        message: str = "Conflict",
        error_code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, status_code=409, error_code=error_code, details=details)


class UserProfileNotFoundError(NotFoundError):
    """Raised when an authenticated identity has no local profile yet."""

    def __init__(self, message: str = "User profile not found"):
        super().__init__(message=message)


class EmailDeliveryError(BaseAppException):
    """Exception raised when the email provider does not accept a message."""

    def __init__(self, message: str = "Failed to send confirmation email"):
        super().__init__(message=message, status_code=500, error_code="EMAIL_DELIVERY_FAILED")
