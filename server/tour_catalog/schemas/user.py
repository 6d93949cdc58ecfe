"""User-related Pydantic schemas."""

from pydantic import BaseModel, Field


class GuideSummary(BaseModel):
    """Public projection of a user substituted for a guide reference."""

    id: str = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Contact email")
    photo: str = Field(..., description="Photo file name")
    role: str = Field(..., description="User role")
