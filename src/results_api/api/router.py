"""Root API router and middleware registration."""

from fastapi import APIRouter, FastAPI

from results_api.api.middleware import setup_cors
from results_api.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with the bulk upload routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from results_api.api.v1.bulk_uploads import centers_router, constituency_results_router

    root_router = APIRouter(prefix=settings.api_prefix)
    root_router.include_router(constituency_results_router)
    root_router.include_router(centers_router)

    return root_router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware on the FastAPI app."""
    setup_cors(app, settings)
