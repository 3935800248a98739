"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from topic_engine.api.v1.router import api_router
from topic_engine.config import settings
from topic_engine.core.exceptions import TopicEngineError
from topic_engine.core.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging(settings.log_level)

    logger.info(
        "Starting Topic Scoring Engine",
        extra={
            "environment": settings.environment,
            "version": settings.app_version,
            "scoring_config_path": settings.scoring_config_path,
        },
    )

    yield

    logger.info("Shutting down Topic Scoring Engine")


async def topic_engine_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map engine errors to 422 responses naming the offending record."""
    details = exc.details if isinstance(exc, TopicEngineError) else {}
    message = exc.message if isinstance(exc, TopicEngineError) else str(exc)
    logger.warning(
        "Scoring request rejected",
        extra={"path": request.url.path, "error": message},
    )
    return JSONResponse(
        status_code=422,
        content={"detail": message, "error": details},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Deterministic topic scoring for seed-phrase research sessions",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_exception_handler(TopicEngineError, topic_engine_error_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get(
        "/health",
        summary="Health check",
        description="Return service health status and version information.",
    )
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()
