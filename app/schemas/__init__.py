# ruff: noqa: F403, F401
"""Schemas package initialization."""

# Import all schemas to ensure they're registered
from .base import *
from .category import *
from .scheduling import *
from .ai import *
from .analytics import *
from .notification import *
from .task import *
from .task import TaskTreeNode
from .user import *

# Rebuild models after all schemas are loaded
TaskTreeNode.model_rebuild()
