from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .db import close_store, init_store
from .errors import DueDateStorageError
from .logging_setup import setup_logging
from .plugin import DueDatePlugin
from .routers import due_dates as due_dates_router
from .settings import Settings, StorageType, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "due-dates",
        "description": "Read, set and clear task due dates, plus the host's task deletion hooks.",
    },
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application around one DueDatePlugin.

    The structured store (when selected) is opened on startup before the plugin
    is constructed and closed again on shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(settings.log_level)
        structured = settings.storage_type is StorageType.STRUCTURED
        if structured:
            init_store(settings.database_url)
        app.state.plugin = DueDatePlugin(settings)
        try:
            yield
        finally:
            if structured:
                close_store()

    app = FastAPI(
        title="Due Dates Plugin",
        description="Optional due dates for host tasks with pluggable storage backends.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": _jsonable_errors(exc),
            },
        )

    @app.exception_handler(DueDateStorageError)
    async def storage_exception_handler(request: Request, exc: DueDateStorageError) -> JSONResponse:
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"error": type(exc).__name__, "message": str(exc)},
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check(request: Request):
        """
        Health check endpoint.

        Returns:
            A JSON object with the selected backend and whether the plugin is enabled.
        """
        plugin: DueDatePlugin = request.app.state.plugin
        return {
            "message": "Healthy",
            "backend": settings.storage_type.value,
            "enabled": plugin.is_enabled,
        }

    app.include_router(due_dates_router.router)
    return app


def _jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry the raw ValueError raised by a validator
    return jsonable_encoder(exc.errors(), custom_encoder={Exception: str})


app = create_app()
