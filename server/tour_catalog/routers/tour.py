"""Tour router for catalog operations."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import NotFoundError
from ..schemas.tour import (
    CreateTourRequest,
    GetTourRequest,
    SearchToursRequest,
    SearchToursResponse,
    Tour,
    TourStatsRequest,
    TourStatsResponse,
    UpdateTourRequest,
)
from ..services.tour_service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/tour", tags=["tour"])


@router.post("/create", response_model=Tour)
async def create_tour(
    request: CreateTourRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    Create a new tour.

    The slug is derived from the name; every violated field rule is
    reported in one response.
    """
    tour = await TourService(db).create_tour(request)
    return JSONResponse(status_code=201, content=tour.model_dump(mode="json"))


@router.post("/update", response_model=Tour)
async def update_tour(
    request: UpdateTourRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Apply changes to a tour, re-running validation and slug derivation."""
    try:
        tour_id = UUID(request.id)
    except ValueError:
        raise NotFoundError(resource_type="tour", resource_id=request.id)

    tour = await TourService(db).update_tour(tour_id, request.changes)
    return JSONResponse(status_code=200, content=tour.model_dump(mode="json"))


@router.post("/search", response_model=SearchToursResponse)
async def search_tours(
    request: SearchToursRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    List tours for the overview page.

    Secret tours are never listed. Uses cursor-based pagination.
    """
    result = await TourService(db).search_tours(request)
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))


@router.post("/get", response_model=Tour)
async def get_tour(
    request: GetTourRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Tour detail by slug, with guides and reviews resolved."""
    tour = await TourService(db).get_tour_by_slug(request.slug)

    logger.debug("Tour detail served", extra={"slug": request.slug, "tour_id": tour.id})

    return JSONResponse(status_code=200, content=tour.model_dump(mode="json"))


@router.post("/stats", response_model=TourStatsResponse)
async def tour_stats(
    request: TourStatsRequest,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Per-difficulty statistics over non-secret tours."""
    stats = await TourService(db).tour_stats(request.min_rating)
    response_data = TourStatsResponse(stats=stats)
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))
