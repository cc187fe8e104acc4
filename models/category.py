"""
Category model with its weekly availability windows.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Category(BaseModel):
    """
    Represents a named, colored grouping of tasks.

    :ivar name: Category name.
    :type name: str
    :ivar color: Hex color used by clients.
    :type color: str
    :ivar is_default: Whether this is the user's default category. Only one
        category per user is expected to carry the flag.
    :type is_default: bool
    """

    __tablename__ = "categories"

    user_id = Column(UUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    color = Column(String(20), default="#007AFF", nullable=False)
    description = Column(Text)
    is_default = Column(Boolean, default=False, nullable=False)

    # Relationships
    user = relationship("User", back_populates="categories")
    schedules = relationship("CategorySchedule", back_populates="category", passive_deletes=True)
    tasks = relationship("Task", back_populates="category")


class CategorySchedule(BaseModel):
    """
    Recurring weekly window in which work of a category is expected.

    :ivar day_of_week: 0 = Sunday ... 6 = Saturday.
    :type day_of_week: int
    :ivar start_hour: First hour of the window (0-24).
    :type start_hour: int
    :ivar end_hour: Hour at which the window closes (0-24).
    :type end_hour: int
    """

    __tablename__ = "category_schedules"

    category_id = Column(
        UUID(), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week = Column(Integer, nullable=False)
    start_hour = Column(Integer, nullable=False)
    end_hour = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    category = relationship("Category", back_populates="schedules")
