"""Common Pydantic schemas."""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ViolationCode(str, Enum):
    """Kinds of rule violations reported for a candidate record."""
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_TYPE = "INVALID_TYPE"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    INVALID_ENUM = "INVALID_ENUM"
    INVALID_DISCOUNT = "INVALID_DISCOUNT"


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="Name of the invalid field")
    code: ViolationCode = Field(..., description="Violated rule")
    message: str = Field(..., description="Validation error message")
    params: Dict[str, Any] = Field(default_factory=dict, description="Bounds, allowed values and the offending value")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


class PaginatedResponse(BaseModel):
    """Base class for paginated responses."""

    next_cursor: Optional[str] = Field(None, description="Cursor for next page")
