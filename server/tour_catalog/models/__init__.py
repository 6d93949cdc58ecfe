"""Models module exporting all database models."""

from .review import Review
from .tour import DIFFICULTIES, Tour
from .user import User, UserRole

__all__ = [
    "Tour",
    "DIFFICULTIES",
    "User",
    "UserRole",
    "Review",
]
