"""Async engine and session factory for the tour store."""

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from .config import settings


_engine_options = {"echo": settings.debug, "pool_pre_ping": True}
if "sqlite" in settings.database_url:
    # In-memory SQLite needs a single shared connection
    _engine_options.update(
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

engine = create_async_engine(settings.database_url, **_engine_options)

# Create async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Create declarative base for models
Base = declarative_base()


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session per request, rolled back if the request fails."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Alias for FastAPI dependency injection
get_db = get_async_session


async def init_db() -> None:
    """Create the users, tours and reviews tables when missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
