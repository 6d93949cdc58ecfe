"""Document-style persistence calls for tours."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from ..core.exceptions import DuplicateKeyError
from ..core.observability import metrics_collector
from ..models.tour import Tour
from .aggregation import Stage, compile_pipeline, guard_pipeline
from .visibility import apply_visibility

logger = logging.getLogger(__name__)


def _to_storage(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert normalized values to column values."""
    stored = dict(values)
    if stored.get("start_dates") is not None:
        stored["start_dates"] = [
            d.isoformat() if isinstance(d, datetime) else d for d in stored["start_dates"]
        ]
    return stored


class TourStore:
    """
    Persistence calls for tours over an async session.

    Reads go through the visibility filter and aggregations through the
    aggregation guard. Writes expect values already accepted by the
    tour validator.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, values: Mapping[str, Any]) -> Tour:
        """
        Insert a new tour.

        Raises:
            DuplicateKeyError: If the database rejects a duplicate name
        """
        tour = Tour(**_to_storage(values))
        self.db.add(tour)
        await self._commit(values.get("name"))
        await self.db.refresh(tour)
        return tour

    async def save(self, tour: Tour, values: Mapping[str, Any]) -> Tour:
        """
        Write changed fields to an existing tour.

        Raises:
            DuplicateKeyError: If the database rejects a duplicate name
        """
        for field, value in _to_storage(values).items():
            setattr(tour, field, value)
        await self._commit(values.get("name", tour.name))
        await self.db.refresh(tour)
        return tour

    async def _commit(self, name: Optional[str]) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Tour write rejected by unique constraint",
                extra={"tour_name": name, "error": str(e.orig)},
            )
            raise DuplicateKeyError("name", name) from e

    def _read_statement(
        self,
        stmt: Optional[Select],
        include_secret: bool,
        include_created_at: bool,
    ) -> Select:
        stmt = stmt if stmt is not None else select(Tour)
        if include_secret:
            metrics_collector.record_secret_override()
        stmt = apply_visibility(stmt, include_secret=include_secret)
        if include_created_at:
            stmt = stmt.options(undefer(Tour.created_at))
        return stmt

    async def find(
        self,
        stmt: Optional[Select] = None,
        include_secret: bool = False,
        include_created_at: bool = False,
    ) -> List[Tour]:
        """
        Run a tour query.

        Args:
            stmt: ``select(Tour)`` with any criteria; all tours when None
            include_secret: Bypass the secret tour filter
            include_created_at: Load the deferred creation timestamp

        Returns:
            Matching tours
        """
        stmt = self._read_statement(stmt, include_secret, include_created_at)
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def find_one(
        self,
        stmt: Optional[Select] = None,
        include_secret: bool = False,
        include_created_at: bool = False,
    ) -> Optional[Tour]:
        """Run a tour query expected to match at most one record."""
        stmt = self._read_statement(stmt, include_secret, include_created_at)
        result = await self.db.execute(stmt.limit(1))
        return result.scalars().first()

    async def aggregate(self, stages: Sequence[Stage]) -> List[Dict[str, Any]]:
        """Run a grouping pipeline over non-secret tours."""
        stmt = compile_pipeline(guard_pipeline(stages))
        result = await self.db.execute(stmt)
        return [dict(row._mapping) for row in result]

    async def name_taken(self, name: str, exclude_id: Optional[UUID] = None) -> Optional[UUID]:
        """
        Return the id of another tour using ``name``, secret tours included.
        """
        stmt = select(Tour.id).where(Tour.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Tour.id != exclude_id)
        result = await self.db.execute(stmt.limit(1))
        return result.scalar_one_or_none()
