#!/usr/bin/env python3
"""Setup script for the tour catalog API."""

import asyncio
import logging
import sys
from uuid import UUID
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select
from tour_catalog.core.database import async_session_factory, close_db
from tour_catalog.models import Review, Tour, User, UserRole
from tour_catalog.services.tour_service import TourService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_GUIDES = [
    {"name": "Lourdes Browning", "email": "lourdes@example.io", "role": UserRole.LEAD_GUIDE.value},
    {"name": "Leo Gillespie", "email": "leo@example.io", "role": UserRole.GUIDE.value},
    {"name": "Kate Morrison", "email": "kate@example.io", "role": UserRole.GUIDE.value},
]

SAMPLE_REVIEWER = {"name": "Sophie Louise Hart", "email": "sophie@example.io", "role": UserRole.USER.value}

SAMPLE_TOURS = [
    {
        "name": "The Forest Hiker",
        "duration": 5,
        "max_group_size": 25,
        "difficulty": "easy",
        "ratings_average": 4.7,
        "ratings_quantity": 37,
        "price": 397,
        "summary": "Breathtaking hike through the Canadian Banff National Park",
        "image_cover": "tour-1-cover.jpg",
        "images": ["tour-1-1.jpg", "tour-1-2.jpg", "tour-1-3.jpg"],
        "start_dates": ["2027-04-25T09:00:00", "2027-07-20T09:00:00", "2027-10-05T09:00:00"],
    },
    {
        "name": "The Sea Explorer",
        "duration": 7,
        "max_group_size": 15,
        "difficulty": "medium",
        "ratings_average": 4.8,
        "ratings_quantity": 23,
        "price": 497,
        "price_discount": 100,
        "summary": "Exploring the jaw-dropping US east coast by foot and by boat",
        "image_cover": "tour-2-cover.jpg",
        "images": ["tour-2-1.jpg", "tour-2-2.jpg", "tour-2-3.jpg"],
        "start_dates": ["2027-06-19T10:00:00", "2027-07-20T10:00:00"],
    },
    {
        "name": "The Snow Adventurer",
        "duration": 4,
        "max_group_size": 10,
        "difficulty": "difficult",
        "ratings_average": 4.5,
        "ratings_quantity": 13,
        "price": 997,
        "summary": "Exciting adventure in the snow with snowboarding and skiing",
        "image_cover": "tour-3-cover.jpg",
        "images": ["tour-3-1.jpg", "tour-3-2.jpg", "tour-3-3.jpg"],
        "start_dates": ["2027-01-05T10:00:00", "2027-02-12T10:00:00"],
    },
    {
        "name": "The Northern Lights",
        "duration": 3,
        "max_group_size": 12,
        "difficulty": "easy",
        "price": 1497,
        "summary": "Enjoy the Northern Lights in one of the best places in the world",
        "image_cover": "tour-4-cover.jpg",
        "secret_tour": True,
    },
]


def setup_database():
    """Setup the database with initial schema."""
    logger.info("Setting up database...")

    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data():
    """Create sample guides, tours and reviews."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        existing_tours = await db.execute(select(func.count()).select_from(Tour))
        if existing_tours.scalar() > 0:
            logger.info("Sample data already exists, skipping...")
            return

        guides = [User(**data) for data in SAMPLE_GUIDES]
        reviewer = User(**SAMPLE_REVIEWER)
        db.add_all([*guides, reviewer])
        await db.commit()

        service = TourService(db)
        created = []
        for i, data in enumerate(SAMPLE_TOURS):
            guide_ids = [str(g.id) for g in guides[: 1 + i % len(guides)]]
            tour = await service.create_tour({**data, "guides": guide_ids})
            created.append(tour)
            logger.info(f"Created tour {tour.slug}")

        db.add_all([
            Review(
                tour_id=UUID(tour.id),
                user_id=reviewer.id,
                review=f"{tour.name} was worth every minute",
                rating=5.0,
            )
            for tour in created
            if not tour.secret_tour
        ])
        await db.commit()

    logger.info("Sample data created successfully!")


async def main():
    """Main setup function."""
    logger.info("Starting tour catalog API setup...")

    # Alembic drives its own event loop for the async engine
    await asyncio.to_thread(setup_database)

    try:
        await create_sample_data()
    finally:
        await close_db()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn tour_catalog.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
