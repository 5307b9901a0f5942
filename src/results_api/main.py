"""FastAPI application factory.

Creates the app with lifespan management, exception handlers and the
bulk upload routers.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from results_api.core.background import task_runner
from results_api.core.config import get_settings
from results_api.core.database import dispose_engine, init_engine
from results_api.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Initialize logging, the engine and the upload directory; dispose the engine on shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir, json_logs=settings.log_json)
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    yield

    if task_runner.active_count:
        logger.warning(f"Shutting down with {task_runner.active_count} bulk upload task(s) still running")
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Election Results API",
        description="Bulk ingestion of constituency and polling-center election results",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    from results_api.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
