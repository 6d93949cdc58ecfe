"""Unit tests for guide and review population."""

from uuid import UUID, uuid4

import pytest

from tour_catalog.services.relation_populator import RelationPopulator
from tour_catalog.services.tour_service import TourService
from tour_catalog.services.tour_store import TourStore


@pytest.mark.asyncio
async def test_guides_are_replaced_with_public_projection(test_session, sample_tour_data, sample_guides):
    service = TourService(test_session)
    guide_ids = [str(g.id) for g in sample_guides]

    tour = await service.create_tour({**sample_tour_data, "guides": guide_ids})

    assert [g.id for g in tour.guides] == guide_ids
    first = tour.guides[0].model_dump()
    assert first["name"] == "Lourdes Browning"
    assert first["role"] == "lead-guide"
    assert "version" not in first
    assert "password_changed_at" not in first


@pytest.mark.asyncio
async def test_dangling_guide_reference_is_dropped(test_session, sample_tour_data, sample_guides):
    service = TourService(test_session)
    missing = str(uuid4())

    tour = await service.create_tour(
        {**sample_tour_data, "guides": [missing, str(sample_guides[1].id)]}
    )

    assert [g.name for g in tour.guides] == ["Leo Gillespie"]


@pytest.mark.asyncio
async def test_malformed_stored_reference_is_dropped(test_session, sample_tour_data, sample_guides):
    service = TourService(test_session)
    created = await service.create_tour({**sample_tour_data, "guides": [str(sample_guides[0].id)]})

    tour = await TourStore(test_session).find_one()
    tour.guides = ["garbage", *tour.guides]
    await test_session.commit()

    documents = await RelationPopulator(test_session).populate([tour])

    assert [g.id for g in documents[0].guides] == [created.guides[0].id]


@pytest.mark.asyncio
async def test_reviews_are_resolved_by_tour_identity(
    test_session, sample_tour_data, sample_reviewer, add_review
):
    service = TourService(test_session)
    tour = await service.create_tour(sample_tour_data)
    other = await service.create_tour({**sample_tour_data, "name": "The Sea Explorer"})
    await add_review(UUID(tour.id), sample_reviewer, text="Loved every minute", rating=4.0)
    await add_review(UUID(other.id), sample_reviewer, text="Too much water", rating=2.0)

    stored = await TourStore(test_session).find()
    documents = await RelationPopulator(test_session).populate(stored, with_reviews=True)
    by_name = {d.name: d for d in documents}

    reviews = by_name["The Forest Hiker"].reviews
    assert [r.model_dump() for r in reviews] == [
        {"review": "Loved every minute", "rating": 4.0, "user": str(sample_reviewer.id)}
    ]
    assert [r.review for r in by_name["The Sea Explorer"].reviews] == ["Too much water"]


@pytest.mark.asyncio
async def test_reviews_absent_unless_requested(test_session, sample_tour_data):
    tour = await TourService(test_session).create_tour(sample_tour_data)

    assert tour.reviews is None


@pytest.mark.asyncio
async def test_tour_without_reviews_gets_empty_list(test_session, sample_tour_data):
    await TourService(test_session).create_tour(sample_tour_data)

    stored = await TourStore(test_session).find()
    documents = await RelationPopulator(test_session).populate(stored, with_reviews=True)

    assert documents[0].reviews == []


@pytest.mark.asyncio
async def test_populate_empty_input(test_session):
    assert await RelationPopulator(test_session).populate([], with_reviews=True) == []
