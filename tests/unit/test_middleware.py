"""Tests for CORS middleware configuration."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from results_api.api.middleware import setup_cors
from results_api.core.config import Settings


def _app(settings: Settings) -> FastAPI:
    app = FastAPI()
    setup_cors(app, settings)

    @app.get("/ping")
    async def ping() -> dict:
        return {"ok": True}

    return app


@pytest.mark.asyncio
async def test_configured_origin_allowed(settings: Settings) -> None:
    configured = settings.model_copy(update={"cors_origins": "http://results.example.com"})
    async with AsyncClient(transport=ASGITransport(app=_app(configured)), base_url="http://test") as client:
        resp = await client.get("/ping", headers={"Origin": "http://results.example.com"})

    assert resp.headers["access-control-allow-origin"] == "http://results.example.com"


@pytest.mark.asyncio
async def test_unlisted_origin_not_echoed(settings: Settings) -> None:
    async with AsyncClient(transport=ASGITransport(app=_app(settings)), base_url="http://test") as client:
        resp = await client.get("/ping", headers={"Origin": "http://elsewhere.example.com"})

    assert "access-control-allow-origin" not in resp.headers
