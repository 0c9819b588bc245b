"""
FastAPI application entry point.

Configures the application with:
- Lifespan handlers for database setup
- CORS middleware
- Correlation ID middleware
- Health and readiness probes
- API routes
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from platelog.api import api_router
from platelog.core.config import get_settings
from platelog.core.logging import get_correlation_id, get_logger, set_correlation_id, setup_logging
from platelog.infrastructure.db.session import close_db, init_db, ping_db

# Initialize logging
setup_logging()
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: str
    database_connected: bool
    recognizer_backend: str


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Handles startup and shutdown tasks:
    - Startup: Create tables
    - Shutdown: Dispose the engine
    """
    logger.info("application_starting")

    try:
        await init_db()
        logger.info("database_initialized")
    except Exception as e:
        logger.error("startup_failed", error=str(e))
        raise

    logger.info(
        "application_started",
        recognizer_backend=get_settings().recognizer_backend,
    )

    yield

    logger.info("application_shutting_down")
    await close_db()
    logger.info("application_shutdown_complete")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Platelog",
        description="Employee vehicle entry log with license-plate recognition",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # The capture UI is served from its own origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else ["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        """Add correlation ID to each request."""
        set_correlation_id(request.headers.get("X-Correlation-ID"))

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = get_correlation_id()

        return response

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["health"],
    )
    async def health_check() -> HealthResponse:
        """
        Basic liveness probe.

        Returns 200 if the application is running.
        """
        return HealthResponse(status="healthy")

    @app.get(
        "/ready",
        response_model=ReadinessResponse,
        tags=["health"],
    )
    async def readiness_check() -> ReadinessResponse:
        """
        Readiness probe for load balancers.

        Returns 200 only if the database answers. The recognizer is an
        external service and is not probed.
        """
        database_connected = await ping_db()

        response = ReadinessResponse(
            status="ready" if database_connected else "not_ready",
            database_connected=database_connected,
            recognizer_backend=settings.recognizer_backend,
        )

        if not database_connected:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=response.model_dump(),
            )

        return response

    app.include_router(api_router)

    return app


# Create app instance
app = create_app()
