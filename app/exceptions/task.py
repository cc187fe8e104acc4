"""Task-related exceptions."""

from .base import BaseAppException


class TaskNotFoundError(BaseAppException):
    """Raised when a task is not found or not owned by the caller."""

    def __init__(self, message: str = "Task not found"):
        super().__init__(message=message, status_code=404, error_code="TASK_NOT_FOUND")


class InvalidTaskOperationError(BaseAppException):
    """Raised when an invalid operation is performed on a task."""

    def __init__(self, message: str = "Invalid task operation"):
        super().__init__(message=message, status_code=400, error_code="INVALID_TASK_OPERATION")


class MaxTaskDepthExceededError(BaseAppException):
    """Raised when task nesting depth exceeds maximum allowed."""

    def __init__(self, message: str = "Maximum task nesting depth exceeded"):
        super().__init__(message=message, status_code=400, error_code="MAX_TASK_DEPTH_EXCEEDED")


class InvalidDependencyError(BaseAppException):
    """Raised when a dependency edge is not acceptable."""

    def __init__(self, message: str = "A task cannot depend on itself"):
        super().__init__(message=message, status_code=400, error_code="INVALID_DEPENDENCY")


class InvalidRecurrenceRuleError(BaseAppException):
    """Raised when a recurrence rule cannot be parsed."""

    def __init__(self, message: str = "Invalid recurrence rule"):
        super().__init__(message=message, status_code=400, error_code="INVALID_RECURRENCE_RULE")
