"""Tour service for business logic operations."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy import func, select

from ..core.config import settings
from ..core.exceptions import NotFoundError
from ..core.observability import metrics_collector
from ..models.tour import Tour
from ..schemas.tour import (
    DifficultyStats,
    SearchToursRequest,
    SearchToursResponse,
    Tour as TourDocument,
    TourInput,
)
from .aggregation import Group, Match, Sort, Stage
from .relation_populator import RelationPopulator
from .slug import derive_slug
from .tour_store import TourStore
from .tour_validator import DEFAULTS, REQUIRED_FIELDS, TourValidator

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = tuple(REQUIRED_FIELDS) + tuple(DEFAULTS)


def tour_stats_pipeline(min_rating: float) -> List[Stage]:
    """Per-difficulty figures for well rated tours, cheapest first."""
    return [
        Match(criteria=(Tour.ratings_average >= min_rating,)),
        Group(
            key=func.upper(Tour.difficulty),
            key_label="difficulty",
            aggregates={
                "num_tours": func.count(Tour.id),
                "num_ratings": func.sum(Tour.ratings_quantity),
                "avg_rating": func.avg(Tour.ratings_average),
                "avg_price": func.avg(Tour.price),
                "min_price": func.min(Tour.price),
                "max_price": func.max(Tour.price),
            },
        ),
        Sort(keys=(("avg_price", 1),)),
    ]


def _candidate(data: Union[TourInput, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, TourInput):
        return data.model_dump(exclude_unset=True)
    return dict(data)


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db):
        self.db = db
        self.store = TourStore(db)
        self.validator = TourValidator(self.store)
        self.populator = RelationPopulator(db)

    async def create_tour(self, request: Union[TourInput, Mapping[str, Any]]) -> TourDocument:
        """
        Create a new tour.

        Args:
            request: Candidate field values

        Returns:
            Created tour with guides resolved

        Raises:
            TourValidationError: If any field rule is violated
            DuplicateKeyError: If a tour with the same name exists
        """
        record = await self.validator.validate(_candidate(request))
        record["slug"] = derive_slug(record["name"])

        tour = await self.store.insert(record)
        metrics_collector.record_tour_created()

        logger.info(
            "Tour created successfully",
            extra={
                "tour_id": str(tour.id),
                "slug": tour.slug,
                "tour_name": tour.name
            }
        )

        documents = await self.populator.populate([tour])
        return documents[0]

    async def update_tour(
        self,
        tour_id: UUID,
        changes: Union[TourInput, Mapping[str, Any]],
        include_secret: bool = False,
    ) -> TourDocument:
        """
        Apply changes to a tour.

        The changes are merged over the stored record and the merged
        record goes through the same validation as a create, so
        ``price_discount`` is compared with the price the tour will
        have after the update. The slug follows the resulting name.
        Secret tours are only reachable with ``include_secret``.

        Raises:
            NotFoundError: If the tour does not exist or is hidden
            TourValidationError: If the merged record violates any rule
            DuplicateKeyError: If the new name is taken
        """
        tour = await self.get_tour_by_id_or_raise(tour_id, include_secret=include_secret)

        current = {field: getattr(tour, field) for field in WRITABLE_FIELDS}
        merged = {**current, **_candidate(changes)}

        record = await self.validator.validate(merged, exclude_id=tour.id)
        record["slug"] = derive_slug(record["name"])

        tour = await self.store.save(tour, record)
        metrics_collector.record_tour_updated()

        logger.info(
            "Tour updated successfully",
            extra={
                "tour_id": str(tour.id),
                "slug": tour.slug,
                "changed_fields": sorted(_candidate(changes)),
            }
        )

        documents = await self.populator.populate([tour])
        return documents[0]

    async def search_tours(
        self,
        request: SearchToursRequest,
        include_secret: bool = False,
    ) -> SearchToursResponse:
        """
        List tours with guides resolved.

        Args:
            request: Filters and pagination
            include_secret: Also list secret tours

        Returns:
            One page of tours ordered by ID
        """
        stmt = select(Tour)

        if request.difficulty:
            stmt = stmt.where(Tour.difficulty == request.difficulty)
        if request.min_price is not None:
            stmt = stmt.where(Tour.price >= request.min_price)
        if request.max_price is not None:
            stmt = stmt.where(Tour.price <= request.max_price)

        if request.cursor:
            try:
                stmt = stmt.where(Tour.id > UUID(request.cursor))
            except ValueError:
                logger.warning(
                    "Invalid cursor provided in tour search",
                    extra={"cursor": request.cursor}
                )

        limit = min(request.limit or settings.search_default_limit, settings.search_max_limit)

        # Fetch one extra to detect a next page
        stmt = stmt.order_by(Tour.id).limit(limit + 1)
        tours = await self.store.find(stmt, include_secret=include_secret)

        next_cursor = None
        if len(tours) > limit:
            tours = tours[:limit]
            next_cursor = str(tours[-1].id)

        items = await self.populator.populate(tours)

        logger.info(
            "Tour search completed",
            extra={
                "total_found": len(items),
                "has_next_page": next_cursor is not None,
                "difficulty": request.difficulty,
            }
        )

        return SearchToursResponse(items=items, next_cursor=next_cursor)

    async def get_tour_by_id(self, tour_id: UUID, include_secret: bool = False) -> Optional[Tour]:
        """
        Get tour by ID.

        Returns:
            Tour if found and visible, None otherwise
        """
        stmt = select(Tour).where(Tour.id == tour_id)
        return await self.store.find_one(stmt, include_secret=include_secret)

    async def get_tour_by_id_or_raise(self, tour_id: UUID, include_secret: bool = False) -> Tour:
        """
        Get tour by ID or raise NotFoundError.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id(tour_id, include_secret=include_secret)
        if not tour:
            logger.warning(
                "Tour not found",
                extra={"tour_id": str(tour_id)}
            )
            raise NotFoundError(
                resource_type="tour",
                resource_id=str(tour_id)
            )
        return tour

    async def get_tour_by_slug(self, slug: str, include_secret: bool = False) -> TourDocument:
        """
        Get the tour detail for a slug, with guides and reviews.

        Raises:
            NotFoundError: If no visible tour has this slug
        """
        stmt = select(Tour).where(Tour.slug == slug)
        tour = await self.store.find_one(stmt, include_secret=include_secret)
        if not tour:
            logger.warning("Tour not found", extra={"slug": slug})
            raise NotFoundError(resource_type="tour", detail=f"No tour found with slug '{slug}'")

        documents = await self.populator.populate([tour], with_reviews=True)
        return documents[0]

    async def tour_stats(self, min_rating: Optional[float] = None) -> List[DifficultyStats]:
        """Aggregate figures per difficulty; secret tours never count."""
        if min_rating is None:
            min_rating = settings.stats_min_rating

        rows = await self.store.aggregate(tour_stats_pipeline(min_rating))
        return [DifficultyStats(**row) for row in rows]
