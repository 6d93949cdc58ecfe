"""Test configuration and fixtures."""

import os

# Point settings at SQLite before the package reads them
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tour_catalog.core.database import Base, get_db
from tour_catalog.models import *  # noqa: F403 - Import all models
from tour_catalog.models import Review, User, UserRole

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """Create a test FastAPI application."""
    from fastapi import FastAPI

    from tour_catalog.main import register_handlers, register_routers

    # Create a simplified test app without lifespan
    app = FastAPI(
        title="Tour Catalog API (Test)",
        version="1.0.0-test",
    )

    register_handlers(app)
    register_routers(app)

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_tour_data():
    """Sample tour data for testing."""
    return {
        "name": "The Forest Hiker",
        "duration": 5,
        "max_group_size": 25,
        "difficulty": "easy",
        "price": 397,
        "summary": "  Breathtaking hike through the Canadian Banff National Park  ",
        "description": "Lorem ipsum dolor sit amet, consectetur adipisicing elit.",
        "image_cover": "tour-1-cover.jpg",
        "images": ["tour-1-1.jpg", "tour-1-2.jpg"],
        "start_dates": ["2027-04-25T09:00:00", "2027-07-20T09:00:00"],
    }


@pytest_asyncio.fixture
async def sample_guides(test_session):
    """Two guides stored in the test database."""
    guides = [
        User(name="Lourdes Browning", email="lourdes@example.com", photo="user-2.jpg", role=UserRole.LEAD_GUIDE.value),
        User(name="Leo Gillespie", email="leo@example.com", photo="user-3.jpg", role=UserRole.GUIDE.value),
    ]
    test_session.add_all(guides)
    await test_session.commit()
    return guides


@pytest_asyncio.fixture
async def sample_reviewer(test_session):
    """A plain user who writes reviews."""
    user = User(name="Sophie Louise Hart", email="sophie@example.com", role=UserRole.USER.value)
    test_session.add(user)
    await test_session.commit()
    return user


@pytest.fixture
def add_review(test_session):
    """Return a coroutine function that stores a review for a tour."""

    async def _add_review(tour_id, user, text="Great tour, would book again", rating=5.0):
        review = Review(review=text, rating=rating, tour_id=tour_id, user_id=user.id)
        test_session.add(review)
        await test_session.commit()
        return review

    return _add_review
