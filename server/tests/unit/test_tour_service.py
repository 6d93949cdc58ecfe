"""Unit tests for tour service."""

import logging
from datetime import datetime
from uuid import UUID, uuid4

import pytest

from tour_catalog.core.exceptions import DuplicateKeyError, NotFoundError, TourValidationError
from tour_catalog.schemas.tour import CreateTourRequest, SearchToursRequest, TourInput
from tour_catalog.services.tour_service import TourService


@pytest.mark.asyncio
async def test_create_tour(test_session, sample_tour_data):
    """Test creating a tour."""
    service = TourService(test_session)

    tour = await service.create_tour(CreateTourRequest(**sample_tour_data))

    assert tour.name == "The Forest Hiker"
    assert tour.slug == "the-forest-hiker"
    assert tour.summary == "Breathtaking hike through the Canadian Banff National Park"
    assert tour.ratings_average == 4.5
    assert tour.ratings_quantity == 0
    assert tour.secret_tour is False
    assert tour.duration_weeks == pytest.approx(5 / 7)
    assert tour.start_dates == [datetime(2027, 4, 25, 9), datetime(2027, 7, 20, 9)]
    assert tour.id is not None


@pytest.mark.asyncio
async def test_create_tour_ignores_caller_slug(test_session, sample_tour_data):
    """Test that a slug supplied by the caller is replaced by the derived one."""
    service = TourService(test_session)

    tour = await service.create_tour({**sample_tour_data, "slug": "my-own-slug"})

    assert tour.slug == "the-forest-hiker"


@pytest.mark.asyncio
async def test_create_tour_rounds_rating(test_session, sample_tour_data):
    service = TourService(test_session)

    tour = await service.create_tour({**sample_tour_data, "ratings_average": 4.666})

    assert tour.ratings_average == 4.7


@pytest.mark.asyncio
async def test_create_tour_duplicate_name(test_session, sample_tour_data):
    """Test creating a tour with duplicate name raises error."""
    service = TourService(test_session)

    await service.create_tour(sample_tour_data)

    with pytest.raises(DuplicateKeyError):
        await service.create_tour({**sample_tour_data, "summary": "Different summary"})


@pytest.mark.asyncio
async def test_create_tour_invalid_discount(test_session, sample_tour_data):
    service = TourService(test_session)

    with pytest.raises(TourValidationError) as exc_info:
        await service.create_tour({**sample_tour_data, "price": 100, "price_discount": 150})

    assert exc_info.value.codes == ["INVALID_DISCOUNT"]
    assert exc_info.value.problem_details["violations"][0]["params"] == {"discount": 150, "price": 100}


@pytest.mark.asyncio
async def test_created_at_only_when_requested(test_session, sample_tour_data):
    service = TourService(test_session)
    created = await service.create_tour(sample_tour_data)

    loaded = await service.store.find_one(include_created_at=True)
    document = (await service.populator.populate([loaded], with_created_at=True))[0]

    assert created.created_at is None
    assert document.id == created.id
    assert isinstance(document.created_at, datetime)


@pytest.mark.asyncio
async def test_update_rederives_slug(test_session, sample_tour_data):
    service = TourService(test_session)
    tour = await service.create_tour(sample_tour_data)

    updated = await service.update_tour(UUID(tour.id), TourInput(name="The Snow Adventurer"))

    assert updated.name == "The Snow Adventurer"
    assert updated.slug == "the-snow-adventurer"
    assert updated.summary == tour.summary


@pytest.mark.asyncio
async def test_update_checks_discount_against_new_price(test_session, sample_tour_data):
    service = TourService(test_session)
    tour = await service.create_tour({**sample_tour_data, "price": 500, "price_discount": 400})

    with pytest.raises(TourValidationError) as exc_info:
        await service.update_tour(UUID(tour.id), {"price": 300})

    assert exc_info.value.codes == ["INVALID_DISCOUNT"]


@pytest.mark.asyncio
async def test_update_reports_merged_record_violations(test_session, sample_tour_data):
    service = TourService(test_session)
    tour = await service.create_tour(sample_tour_data)

    with pytest.raises(TourValidationError) as exc_info:
        await service.update_tour(UUID(tour.id), {"name": "Too short", "difficulty": "extreme"})

    assert sorted(exc_info.value.codes) == ["INVALID_ENUM", "OUT_OF_RANGE"]


@pytest.mark.asyncio
async def test_update_to_taken_name(test_session, sample_tour_data):
    service = TourService(test_session)
    await service.create_tour(sample_tour_data)
    other = await service.create_tour({**sample_tour_data, "name": "The Sea Explorer"})

    with pytest.raises(DuplicateKeyError):
        await service.update_tour(UUID(other.id), {"name": "The Forest Hiker"})


@pytest.mark.asyncio
async def test_update_missing_tour(test_session):
    service = TourService(test_session)

    with pytest.raises(NotFoundError):
        await service.update_tour(uuid4(), {"price": 10})


@pytest.mark.asyncio
async def test_update_hides_secret_tour_without_override(test_session, sample_tour_data):
    service = TourService(test_session)
    tour = await service.create_tour({**sample_tour_data, "secret_tour": True})

    with pytest.raises(NotFoundError):
        await service.update_tour(UUID(tour.id), {"price": 420})

    updated = await service.update_tour(UUID(tour.id), {"price": 420}, include_secret=True)

    assert updated.price == 420
    assert updated.secret_tour is True


@pytest.mark.asyncio
async def test_get_tour_by_id(test_session, sample_tour_data):
    """Test getting a tour by ID."""
    service = TourService(test_session)
    created_tour = await service.create_tour(sample_tour_data)

    found_tour = await service.get_tour_by_id(UUID(created_tour.id))

    assert found_tour is not None
    assert str(found_tour.id) == created_tour.id


@pytest.mark.asyncio
async def test_get_tour_by_id_not_found(test_session):
    """Test getting a non-existent tour returns None."""
    service = TourService(test_session)

    tour = await service.get_tour_by_id(uuid4())
    assert tour is None


@pytest.mark.asyncio
async def test_get_tour_by_slug_with_reviews(test_session, sample_tour_data, sample_reviewer, add_review):
    """Test getting a tour by slug."""
    service = TourService(test_session)
    created_tour = await service.create_tour(sample_tour_data)
    await add_review(UUID(created_tour.id), sample_reviewer)

    found_tour = await service.get_tour_by_slug("the-forest-hiker")

    assert found_tour.id == created_tour.id
    assert [r.rating for r in found_tour.reviews] == [5.0]


@pytest.mark.asyncio
async def test_get_secret_tour_by_slug(test_session, sample_tour_data):
    service = TourService(test_session)
    await service.create_tour({**sample_tour_data, "secret_tour": True})

    with pytest.raises(NotFoundError):
        await service.get_tour_by_slug("the-forest-hiker")

    found = await service.get_tour_by_slug("the-forest-hiker", include_secret=True)
    assert found.secret_tour is True


@pytest.mark.asyncio
async def test_search_excludes_secret_and_filters(test_session, sample_tour_data):
    service = TourService(test_session)
    await service.create_tour({**sample_tour_data, "name": "Secret Forest Tour", "secret_tour": True})
    await service.create_tour({**sample_tour_data, "name": "Public Forest Tour"})
    await service.create_tour({**sample_tour_data, "name": "Hard Mountain Tour", "difficulty": "difficult"})

    everything = await service.search_tours(SearchToursRequest())
    easy = await service.search_tours(SearchToursRequest(difficulty="easy"))
    with_secret = await service.search_tours(SearchToursRequest(), include_secret=True)

    assert sorted(t.name for t in everything.items) == ["Hard Mountain Tour", "Public Forest Tour"]
    assert [t.name for t in easy.items] == ["Public Forest Tour"]
    assert len(with_secret.items) == 3


@pytest.mark.asyncio
async def test_search_price_bounds(test_session, sample_tour_data):
    service = TourService(test_session)
    for name, price in [("Budget Forest Tour", 100), ("Regular Forest Tour", 400), ("Luxury Forest Tour", 2000)]:
        await service.create_tour({**sample_tour_data, "name": name, "price": price})

    result = await service.search_tours(SearchToursRequest(min_price=200, max_price=1000))

    assert [t.name for t in result.items] == ["Regular Forest Tour"]


@pytest.mark.asyncio
async def test_search_pagination(test_session, sample_tour_data):
    service = TourService(test_session)
    for i in range(5):
        await service.create_tour({**sample_tour_data, "name": f"Forest Tour Number {i}"})

    first = await service.search_tours(SearchToursRequest(limit=3))
    second = await service.search_tours(SearchToursRequest(limit=3, cursor=first.next_cursor))

    assert len(first.items) == 3
    assert first.next_cursor == first.items[-1].id
    assert len(second.items) == 2
    assert second.next_cursor is None
    assert not {t.id for t in first.items} & {t.id for t in second.items}


@pytest.mark.asyncio
async def test_writes_log_at_info_level(test_session, sample_tour_data, caplog):
    """Test that create, reject and duplicate paths log without failing."""
    caplog.set_level(logging.INFO)
    service = TourService(test_session)

    created = await service.create_tour(sample_tour_data)
    with pytest.raises(TourValidationError):
        await service.create_tour({**sample_tour_data, "name": "Too short"})
    with pytest.raises(DuplicateKeyError):
        await service.create_tour(sample_tour_data)

    messages = [record.getMessage() for record in caplog.records]
    assert "Tour created successfully" in messages
    assert "Tour candidate rejected" in messages
    assert "Tour name already taken" in messages
    created_record = next(r for r in caplog.records if r.getMessage() == "Tour created successfully")
    assert created_record.tour_name == created.name


@pytest.mark.asyncio
async def test_store_duplicate_logs_at_info_level(test_session, sample_tour_data, caplog):
    """Test the unique constraint path when the name check is bypassed."""
    caplog.set_level(logging.INFO)
    service = TourService(test_session)
    await service.create_tour(sample_tour_data)
    record = service.validator.normalize(sample_tour_data)
    record["slug"] = "the-forest-hiker"

    with pytest.raises(DuplicateKeyError):
        await service.store.insert(record)


@pytest.mark.asyncio
async def test_fractional_duration_is_accepted(test_session, sample_tour_data):
    tour = await TourService(test_session).create_tour({**sample_tour_data, "duration": 2.5})

    assert tour.duration == 2.5
    assert tour.duration_weeks == pytest.approx(2.5 / 7)
