"""Tour model definition."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base

DIFFICULTIES = ("easy", "medium", "difficult")


class Tour(Base):
    """A catalog tour; guides are held as user id references."""

    __tablename__ = "tours"
    __table_args__ = (
        Index("ix_tours_price_ratings_average", "price", "ratings_average"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Tour information
    name: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    duration: Mapped[float] = mapped_column(Float, nullable=False)
    max_group_size: Mapped[float] = mapped_column(Float, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(16), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Ratings and pricing
    ratings_average: Mapped[float] = mapped_column(Float, nullable=False, default=4.5)
    ratings_quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    price_discount: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Media
    image_cover: Mapped[str] = mapped_column(String(255), nullable=False)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Schedule, stored as ISO 8601 strings
    start_dates: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    secret_tour: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # User ids by reference; resolved at read time
    guides: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Left out of the default projection
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, deferred=True
    )

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, name='{self.name}', slug='{self.slug}')>"
