"""User model definition."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class UserRole(str, Enum):
    """User role enumeration."""
    USER = "user"
    GUIDE = "guide"
    LEAD_GUIDE = "lead-guide"
    ADMIN = "admin"


class User(Base):
    """User entity; guides referenced by tours are users."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    photo: Mapped[str] = mapped_column(String(255), nullable=False, default="default.jpg")
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.USER.value)

    # Internal fields, never part of the public projection
    password_changed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
