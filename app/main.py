"""Freight sales assignment service — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.adapters.persistence.database import engine
from app.config import settings
from app.domain.errors import PersistenceError
from app.infrastructure.api.routes_assignments import router as assignments_router
from app.infrastructure.api.routes_companies import router as companies_router
from app.infrastructure.api.routes_health import router as health_router
from app.infrastructure.api.routes_representatives import router as representatives_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)
    yield
    await engine.dispose()


async def _persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    # Full error (SQL and parameters included) stays in the log
    logger.error("Persistence error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Storage temporarily unavailable, retry later"},
    )


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )

    app = FastAPI(
        title="Freight Sales Assignment Service",
        description="Company registration and fair round-robin sales representative assignment",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PersistenceError, _persistence_error_handler)

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(companies_router, prefix="/api")
    app.include_router(assignments_router, prefix="/api")
    app.include_router(representatives_router, prefix="/api")

    return app


app = create_app()
