"""Review-related Pydantic schemas."""

from pydantic import BaseModel, Field


class ReviewSummary(BaseModel):
    """Review projection embedded in a tour detail."""

    review: str = Field(..., description="Review text")
    rating: float = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    user: str = Field(..., description="ID of the reviewing user")
