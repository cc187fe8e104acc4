"""Scheduling exceptions."""

from .base import BadRequestError, ConflictError


class NoAvailableSlotsError(ConflictError):
    """Raised when no slot fits the task before its due date."""

    def __init__(self, message: str = "No available time slots found for this task"):
        super().__init__(message=message, error_code="NO_AVAILABLE_SLOTS")


class SchedulingInputError(BadRequestError):
    """Raised when a task lacks what is needed to schedule it."""

    def __init__(self, message: str = "Task cannot be scheduled"):
        super().__init__(message=message, error_code="SCHEDULING_INPUT_ERROR")
