"""Unit tests for secret tour filtering."""

import pytest
from sqlalchemy import select

from tour_catalog.models.tour import Tour
from tour_catalog.services.tour_store import TourStore
from tour_catalog.services.tour_validator import TourValidator
from tour_catalog.services.visibility import apply_visibility, is_visibility_applied


async def store_tour(store, data, name, secret):
    record = TourValidator().normalize({**data, "name": name, "secret_tour": secret})
    record["slug"] = name.lower().replace(" ", "-")
    return await store.insert(record)


def test_filter_tags_statement():
    stmt = apply_visibility(select(Tour))

    assert is_visibility_applied(stmt)
    assert "secret_tour IS NOT" in str(stmt)


def test_filter_is_idempotent():
    once = apply_visibility(select(Tour))
    twice = apply_visibility(once)

    assert twice is once
    assert str(twice).count("IS NOT") == 1


def test_override_leaves_statement_untouched():
    stmt = select(Tour)

    assert apply_visibility(stmt, include_secret=True) is stmt


@pytest.mark.asyncio
async def test_listing_excludes_secret_tours(test_session, sample_tour_data):
    store = TourStore(test_session)
    await store_tour(store, sample_tour_data, "Secret Tour A", secret=True)
    await store_tour(store, sample_tour_data, "Public Tour B", secret=False)

    tours = await store.find()

    assert [tour.name for tour in tours] == ["Public Tour B"]


@pytest.mark.asyncio
async def test_override_lists_secret_tours(test_session, sample_tour_data):
    store = TourStore(test_session)
    await store_tour(store, sample_tour_data, "Secret Tour A", secret=True)
    await store_tour(store, sample_tour_data, "Public Tour B", secret=False)

    tours = await store.find(include_secret=True)

    assert sorted(tour.name for tour in tours) == ["Public Tour B", "Secret Tour A"]


@pytest.mark.asyncio
async def test_single_lookup_excludes_secret_tour(test_session, sample_tour_data):
    store = TourStore(test_session)
    secret = await store_tour(store, sample_tour_data, "Secret Tour A", secret=True)

    stmt = select(Tour).where(Tour.id == secret.id)

    assert await store.find_one(stmt) is None
    assert (await store.find_one(stmt, include_secret=True)).id == secret.id


@pytest.mark.asyncio
async def test_prefiltered_statement_is_not_filtered_twice(test_session, sample_tour_data):
    store = TourStore(test_session)
    await store_tour(store, sample_tour_data, "Public Tour B", secret=False)

    tours = await store.find(apply_visibility(select(Tour)))

    assert len(tours) == 1
