"""
FastAPI application factory.

This module initializes the FastAPI application instance. It is responsible for:
1.  **Middleware Setup**: CORS for the upload front-end.
2.  **Exception Handling**: global handlers so every error returns JSON.
3.  **Routing**: mounting the documents router and the health probe.
4.  **Lifecycle**: wiring the services (engine, object store, job store) at startup.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docextract import __version__
from docextract.api.routers import documents
from docextract.core.errors import ConfigurationError, DocExtractError, ReportReadError, StorageError
from docextract.core.settings import get_logger
from docextract.services import get_services

logger = get_logger(__name__)

_ERROR_STATUS: dict[type[DocExtractError], tuple[int, str]] = {
    StorageError: (502, "Storage Error"),
    ReportReadError: (500, "Result Unreadable"),
    ConfigurationError: (503, "Service Misconfigured"),
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the process-wide services before the first request."""
    services = get_services()
    logger.info(
        "DocExtract API starting (storage=%s, trigger=%s)",
        services.settings.storage_backend,
        services.settings.trigger_mode,
    )
    yield
    logger.info("DocExtract API shutting down")


def create_app() -> FastAPI:
    """
    Construct and configure the DocExtract FastAPI application.

    Returns
    -------
    FastAPI
        The configured ASGI application ready to be served by Uvicorn.
    """
    app = FastAPI(
        title="DocExtract API",
        description="Document upload, analysis status and Excel results",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Global Exception Handlers
    # -----------------------------------------------------------------------
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler so unhandled exceptions return structured JSON."""
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": str(exc),
                "path": request.url.path,
            },
        )

    @app.exception_handler(DocExtractError)
    async def domain_error_handler(request: Request, exc: DocExtractError) -> JSONResponse:
        """Map domain errors to a status code by family."""
        status_code, label = _ERROR_STATUS.get(type(exc), (500, "Processing Error"))
        logger.error("%s on %s: %s", label, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"error": label, "detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Map Python ValueErrors to HTTP 400 Bad Request."""
        return JSONResponse(
            status_code=400,
            content={
                "error": "Bad Request",
                "detail": str(exc),
            },
        )

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    app.include_router(documents.router)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        """Simple liveness probe."""
        return {"status": "ok", "version": __version__}

    return app


__all__ = ["create_app"]
