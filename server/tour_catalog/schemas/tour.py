"""Tour-related Pydantic schemas."""

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, computed_field

from .common import PaginatedResponse
from .review import ReviewSummary
from .user import GuideSummary


class TourInput(BaseModel):
    """
    Writable tour fields.

    Values are taken as sent. Presence, types, bounds and cross-field
    rules are enforced by the tour validator so that all violations,
    wrong types included, are reported together. ``slug`` is derived
    and is not accepted from callers.
    """

    name: Any = Field(None, description="Tour name, 10 to 40 characters")
    duration: Any = Field(None, description="Duration in days")
    max_group_size: Any = Field(None, description="Maximum group size")
    difficulty: Any = Field(None, description="easy, medium or difficult")
    ratings_average: Any = Field(None, description="Average rating from 1 to 5")
    ratings_quantity: Any = Field(None, description="Number of ratings")
    price: Any = Field(None, description="Tour price")
    price_discount: Any = Field(None, description="Discounted price, below price")
    summary: Any = Field(None, description="Short summary")
    description: Any = Field(None, description="Long description")
    image_cover: Any = Field(None, description="Cover image file name")
    images: Any = Field(None, description="Gallery image file names")
    start_dates: Any = Field(None, description="Scheduled start dates (ISO 8601)")
    secret_tour: Any = Field(None, description="Hide from public listings")
    guides: Any = Field(None, description="IDs of guiding users")


class CreateTourRequest(TourInput):
    """Request schema for creating a tour."""


class UpdateTourRequest(BaseModel):
    """Request schema for updating a tour."""

    id: str = Field(..., description="Tour to update")
    changes: TourInput = Field(..., description="Fields to change")


class GetTourRequest(BaseModel):
    """Request schema for fetching one tour by slug."""

    slug: str = Field(..., min_length=1, max_length=64, description="URL-friendly slug")


class SearchToursRequest(BaseModel):
    """Request schema for listing tours."""

    difficulty: Optional[Literal["easy", "medium", "difficult"]] = Field(None, description="Filter by difficulty")
    min_price: Optional[float] = Field(None, ge=0, description="Lowest price to include")
    max_price: Optional[float] = Field(None, ge=0, description="Highest price to include")
    cursor: Optional[str] = Field(None, description="Pagination cursor")
    limit: Optional[int] = Field(None, ge=1, description="Results per page")


class TourStatsRequest(BaseModel):
    """Request schema for tour statistics."""

    min_rating: Optional[float] = Field(None, ge=1, le=5, description="Minimum average rating to include")


class Tour(BaseModel):
    """Tour response schema."""

    id: str = Field(..., description="Unique tour ID")
    name: str = Field(..., description="Tour name")
    slug: str = Field(..., description="URL-friendly slug")
    duration: float = Field(..., description="Duration in days")
    max_group_size: float = Field(..., description="Maximum group size")
    difficulty: str = Field(..., description="Difficulty level")
    ratings_average: float = Field(..., description="Average rating")
    ratings_quantity: float = Field(..., description="Number of ratings")
    price: float = Field(..., description="Tour price")
    price_discount: Optional[float] = Field(None, description="Discounted price")
    summary: str = Field(..., description="Short summary")
    description: Optional[str] = Field(None, description="Long description")
    image_cover: str = Field(..., description="Cover image file name")
    images: List[str] = Field(default_factory=list, description="Gallery image file names")
    start_dates: List[datetime] = Field(default_factory=list, description="Scheduled start dates (ISO 8601)")
    secret_tour: bool = Field(False, description="Hidden from public listings")
    guides: List[GuideSummary] = Field(default_factory=list, description="Resolved guides")
    reviews: Optional[List[ReviewSummary]] = Field(None, description="Reviews, present on tour detail only")
    created_at: Optional[datetime] = Field(None, description="Creation time, present only when requested")

    @computed_field
    @property
    def duration_weeks(self) -> float:
        """Duration expressed in weeks."""
        return self.duration / 7


class SearchToursResponse(PaginatedResponse):
    """Response schema for tour search."""

    items: List[Tour] = Field(..., description="Found tours")


class DifficultyStats(BaseModel):
    """Aggregate figures for one difficulty level."""

    difficulty: str = Field(..., description="Upper-cased difficulty level")
    num_tours: int = Field(..., description="Number of tours")
    num_ratings: float = Field(..., description="Sum of ratings quantity")
    avg_rating: float = Field(..., description="Mean of ratings average")
    avg_price: float = Field(..., description="Mean price")
    min_price: float = Field(..., description="Lowest price")
    max_price: float = Field(..., description="Highest price")


class TourStatsResponse(BaseModel):
    """Response schema for tour statistics."""

    stats: List[DifficultyStats] = Field(..., description="Figures per difficulty, cheapest first")
