"""Category-related exceptions."""

from .base import BaseAppException


class CategoryNotFoundError(BaseAppException):
    """Raised when a category is not found or not owned by the caller."""

    def __init__(self, message: str = "Category not found"):
        super().__init__(message=message, status_code=404, error_code="CATEGORY_NOT_FOUND")


class DefaultCategoryDeletionError(BaseAppException):
    """Raised when deleting the user's default category."""

    def __init__(self, message: str = "Cannot delete default category"):
        super().__init__(message=message, status_code=400, error_code="DEFAULT_CATEGORY")


class CategoryInUseError(BaseAppException):
    """Raised when deleting a category that still has tasks."""

    def __init__(
        self,
        message: str = (
            "Cannot delete category with existing tasks. "
            "Please reassign or delete the tasks first."
        ),
    ):
        super().__init__(message=message, status_code=400, error_code="CATEGORY_IN_USE")
