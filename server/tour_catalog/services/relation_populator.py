"""Read-time resolution of guide references and the reviews back-reference."""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence
from uuid import UUID

import structlog
from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.observability import metrics_collector
from ..models.review import Review
from ..models.tour import Tour
from ..models.user import User
from ..schemas.review import ReviewSummary
from ..schemas.tour import Tour as TourDocument
from ..schemas.user import GuideSummary

logger = structlog.get_logger(__name__)


def _parse_id(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except ValueError:
        return None


def guide_summary(user: User) -> GuideSummary:
    """Public projection of a user; internal version and password fields are left out."""
    return GuideSummary(
        id=str(user.id),
        name=user.name,
        email=user.email,
        photo=user.photo,
        role=user.role,
    )


def tour_document(
    tour: Tour,
    guides: Sequence[GuideSummary] = (),
    reviews: Optional[Sequence[ReviewSummary]] = None,
    with_created_at: bool = False,
) -> TourDocument:
    """Assemble the response document for a loaded tour."""
    show_created_at = with_created_at and "created_at" not in inspect(tour).unloaded
    return TourDocument(
        id=str(tour.id),
        name=tour.name,
        slug=tour.slug,
        duration=tour.duration,
        max_group_size=tour.max_group_size,
        difficulty=tour.difficulty,
        ratings_average=tour.ratings_average,
        ratings_quantity=tour.ratings_quantity,
        price=tour.price,
        price_discount=tour.price_discount,
        summary=tour.summary,
        description=tour.description,
        image_cover=tour.image_cover,
        images=list(tour.images or []),
        start_dates=list(tour.start_dates or []),
        secret_tour=tour.secret_tour,
        guides=list(guides),
        reviews=list(reviews) if reviews is not None else None,
        created_at=tour.created_at if show_created_at else None,
    )


class RelationPopulator:
    """
    Resolves relations of tours at read time.

    Each guide reference is replaced with the referenced user's public
    projection. References that do not resolve are dropped. Reviews are
    looked up by tour id. Nothing is cached between calls.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_guides(self, tours: Sequence[Tour]) -> Dict[UUID, List[GuideSummary]]:
        """Map each tour id to its resolved guides, in reference order."""
        wanted = {_parse_id(ref) for tour in tours for ref in (tour.guides or [])}
        wanted.discard(None)

        users: Dict[UUID, GuideSummary] = {}
        if wanted:
            result = await self.db.execute(select(User).where(User.id.in_(wanted)))
            users = {user.id: guide_summary(user) for user in result.scalars()}

        resolved: Dict[UUID, List[GuideSummary]] = {}
        for tour in tours:
            guides = []
            dropped = []
            for ref in tour.guides or []:
                summary = users.get(_parse_id(ref))
                if summary is None:
                    dropped.append(ref)
                else:
                    guides.append(summary)
            if dropped:
                logger.debug(
                    "Dropped unresolved guide references",
                    tour_id=str(tour.id),
                    references=dropped,
                )
                metrics_collector.record_unresolved_reference("guides", len(dropped))
            resolved[tour.id] = guides

        return resolved

    async def resolve_reviews(self, tours: Sequence[Tour]) -> Dict[UUID, List[ReviewSummary]]:
        """Map each tour id to the reviews whose tour reference equals it."""
        reviews: Dict[UUID, List[ReviewSummary]] = defaultdict(list)
        if not tours:
            return reviews

        stmt = (
            select(Review.tour_id, Review.review, Review.rating, Review.user_id)
            .where(Review.tour_id.in_([tour.id for tour in tours]))
            .order_by(Review.created_at)
        )
        result = await self.db.execute(stmt)
        for row in result:
            reviews[row.tour_id].append(
                ReviewSummary(review=row.review, rating=row.rating, user=str(row.user_id))
            )
        return reviews

    async def populate(
        self,
        tours: Sequence[Tour],
        with_reviews: bool = False,
        with_created_at: bool = False,
    ) -> List[TourDocument]:
        """
        Build response documents with guides and, optionally, reviews.

        Args:
            tours: Loaded tours
            with_reviews: Also resolve the reviews back-reference
            with_created_at: Include the creation time when it was loaded

        Returns:
            One document per tour, in input order
        """
        guides = await self.resolve_guides(tours)
        reviews = await self.resolve_reviews(tours) if with_reviews else None

        return [
            tour_document(
                tour,
                guides=guides.get(tour.id, []),
                reviews=reviews.get(tour.id, []) if reviews is not None else None,
                with_created_at=with_created_at,
            )
            for tour in tours
        ]
