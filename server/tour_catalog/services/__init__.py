"""Service layer package."""

from .relation_populator import RelationPopulator
from .slug import derive_slug
from .tour_service import TourService
from .tour_store import TourStore
from .tour_validator import TourValidator
from .visibility import apply_visibility

__all__ = [
    "RelationPopulator",
    "TourService",
    "TourStore",
    "TourValidator",
    "apply_visibility",
    "derive_slug",
]
