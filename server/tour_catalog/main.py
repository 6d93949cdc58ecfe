"""Application factory for the tour catalog API."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.database import close_db, engine, init_db
from .core.exceptions import (
    ProblemDetailsException,
    generic_exception_handler,
    problem_details_handler,
    request_validation_handler,
)
from .core.middleware import setup_middleware
from .core.observability import (
    SERVICE_VERSION,
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .routers import health, metrics, tour

setup_structured_logging()

# Modules log through stdlib logging with extra= context
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Wire up tracing, metrics and the tour tables before serving."""
    logger.info(
        "Starting tour catalog",
        extra={"environment": settings.environment, "version": SERVICE_VERSION},
    )

    try:
        setup_tracing()
        setup_metrics()
        instrument_sqlalchemy(engine)
        await init_db()
    except Exception as e:
        logger.error(f"Tour catalog failed to start: {e}")
        raise

    logger.info("Tour catalog ready")
    yield

    await close_db()
    logger.info("Tour catalog stopped")


def register_handlers(app: FastAPI) -> None:
    """Render every error as RFC 9457 Problem Details."""
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)


def register_routers(app: FastAPI) -> None:
    app.include_router(health.probes)
    app.include_router(health.router)
    app.include_router(tour.router)
    app.include_router(metrics.router)


def create_app() -> FastAPI:
    """Build the catalog app; docs are only served outside production."""
    app = FastAPI(
        title="Tour Catalog API",
        description="Validated tour records with derived slugs, hidden secret tours and resolved guides and reviews",
        version=SERVICE_VERSION,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "traceparent"],
    )
    setup_middleware(app, enable_logging=True)
    instrument_fastapi(app)

    register_handlers(app)
    register_routers(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tour_catalog.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
