"""
Provides the User model for the application's database schema.

A User is the local profile record of an identity held by the external
identity provider. Profiles are keyed by email: the identity provider's
token carries the email, and the first task or category created by a new
identity creates the profile lazily.

Relationships
-------------
tasks : sqlalchemy.orm.relationship
    One-to-many relationship with `Task`.
categories : sqlalchemy.orm.relationship
    One-to-many relationship with `Category`.
notifications : sqlalchemy.orm.relationship
    One-to-many relationship with `Notification`.
communications : sqlalchemy.orm.relationship
    One-to-many relationship with `Communication`.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class User(BaseModel):
    """
    Represents a user entity in the application.

    :ivar email: Email address of the user. It must be unique.
    :type email: str
    :ivar name: Display name taken from the identity provider metadata.
    :type name: str
    :ivar avatar: Avatar URL taken from the identity provider metadata.
    :type avatar: str
    """

    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255))
    avatar = Column(String(500))

    # Relationships
    tasks = relationship("Task", back_populates="user", passive_deletes=True)
    categories = relationship("Category", back_populates="user", passive_deletes=True)
    notifications = relationship("Notification", back_populates="user", passive_deletes=True)
    communications = relationship("Communication", back_populates="user", passive_deletes=True)
