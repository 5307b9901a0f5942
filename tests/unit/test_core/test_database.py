"""Tests for the database engine and session management module."""

import pytest
from sqlalchemy import text

import results_api.core.database as db_module
from results_api.core.database import dispose_engine, get_engine, get_session_factory, init_engine, open_session


class TestUninitialized:
    """Accessors fail loudly before init_engine."""

    def test_get_engine_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(db_module, "_engine", None)
        with pytest.raises(RuntimeError, match="Database engine not initialized"):
            get_engine()

    def test_get_session_factory_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(db_module, "_session_factory", None)
        with pytest.raises(RuntimeError, match="Session factory not initialized"):
            get_session_factory()


class TestInitEngine:
    """Tests for init_engine."""

    @pytest.mark.asyncio
    async def test_sqlite_engine_has_no_pool_sizing(self) -> None:
        engine = init_engine("sqlite+aiosqlite:///:memory:")
        try:
            assert get_engine() is engine
            assert engine.url.drivername == "sqlite+aiosqlite"
        finally:
            await dispose_engine()

    @pytest.mark.asyncio
    async def test_open_session_executes(self) -> None:
        init_engine("sqlite+aiosqlite:///:memory:")
        try:
            async with open_session() as session:
                assert (await session.execute(text("SELECT 1"))).scalar_one() == 1
        finally:
            await dispose_engine()

    @pytest.mark.asyncio
    async def test_dispose_forgets_factory(self) -> None:
        init_engine("sqlite+aiosqlite:///:memory:")
        await dispose_engine()

        with pytest.raises(RuntimeError):
            get_session_factory()
