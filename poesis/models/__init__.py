"""SQLAlchemy models for the poetry catalog (PostgreSQL / SQLite)."""

from .base import Base
from .user import User, UserRole
from .poem import Poem
from .user_poem import UserPoem

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Poem",
    "UserPoem",
]
