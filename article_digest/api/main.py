"""
Article Digest API - Main FastAPI Application

Accepts extracted article text and returns generated artifacts. Fetching
and parsing the article page is the caller's job.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import DigestSettings, configure_logging, get_settings
from ..errors import ErrorCategory, GenerationError, InputError, classify_error
from ..service import AnalysisService, create_analysis_service
from . import routes

logger = logging.getLogger(__name__)

_CATEGORY_STATUS = {
    ErrorCategory.TIMEOUT: 504,
    ErrorCategory.CONFIGURATION: 500,
}


def error_status(exc: GenerationError) -> int:
    """HTTP status for a generation failure."""
    if isinstance(exc, InputError):
        return 400
    return _CATEGORY_STATUS.get(classify_error(exc), 502)


def create_app(
    settings: Optional[DigestSettings] = None,
    service: Optional[AnalysisService] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings; uses cached settings if not provided
        service: Prebuilt analysis service; built from settings if not provided
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        configure_logging(settings)
        logger.info(
            "Starting article digest API",
            extra={"environment": settings.environment},
        )

        analysis_service = service or create_analysis_service(settings)
        app.state.analysis_service = analysis_service
        analysis_service.cache.start()

        try:
            yield
        finally:
            logger.info("Shutting down article digest API")
            analysis_service.cache.shutdown()

    app = FastAPI(
        title="Article Digest API",
        description="Summaries, key points, posts and translations of article text",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(routes.router, prefix="/api/v1", tags=["analyze"])

    @app.exception_handler(GenerationError)
    async def generation_exception_handler(request: Request, exc: GenerationError):
        category = ErrorCategory.UNKNOWN if isinstance(exc, InputError) else classify_error(exc)
        logger.warning(
            f"Generation failed: {exc}",
            extra={"path": request.url.path, "category": category.value},
        )
        return JSONResponse(
            status_code=error_status(exc),
            content={
                "error": str(exc) if isinstance(exc, InputError) else category.message,
                "category": category.value,
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "category": ErrorCategory.UNKNOWN.value},
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app
