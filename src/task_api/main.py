from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_setup import setup_logging
from .repositories import Repository, TaskStoreError, get_repository
from .routers import tasks as tasks_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, list, fetch and partially update task records.",
    },
]


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _register_exception_handlers(app: FastAPI) -> None:
    """
    Render every failure as ``{"error": "<message>"}``; clients tell failure
    kinds apart by status code only.
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected request body for %s %s: %s", request.method, request.url.path, exc.errors())
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    @app.exception_handler(TaskStoreError)
    async def store_exception_handler(request: Request, exc: TaskStoreError) -> JSONResponse:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


# PUBLIC_INTERFACE
def create_app(
    repository: Optional[Repository] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        repository: Store to serve from. When omitted the lifespan configures
            logging, builds the repository selected by settings (connecting to
            MongoDB, which fails startup if the server does not answer) and
            closes it on shutdown.
        settings: Settings override; defaults to ``get_settings()``.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(settings.log_level)
        app.state.repository = get_repository(settings)
        logger.info("Task API started with %s backend", settings.persistence_backend)
        try:
            yield
        finally:
            app.state.repository.close()

    app = FastAPI(
        title="Task Manager API",
        description="REST API for creating, listing, fetching and updating tasks stored in MongoDB.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan if repository is None else None,
    )

    if repository is not None:
        app.state.repository = repository

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(tasks_router.router)
    return app


app = create_app()
