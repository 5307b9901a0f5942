"""Shared test fixtures: settings, in-memory database, users, tokens and sample result rows."""

import uuid
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pandas as pd
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import StaticPool

from results_api.core.config import Settings
from results_api.core.database import dispose_engine, get_session_factory, init_engine
from results_api.core.security import create_access_token
from results_api.models.base import Base
from results_api.models.user import User

RowFactory = Callable[..., dict[str, str]]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Test application settings."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key-not-for-production",
        jwt_algorithm="HS256",
        upload_dir=str(tmp_path / "uploads"),
        bulk_upload_batch_size=2,
    )  # type: ignore[call-arg]


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Initialize the module-level engine on a shared in-memory SQLite database."""
    engine = init_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await dispose_engine()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Per-test session from the application's session factory."""
    async with get_session_factory()() as session:
        yield session


@pytest.fixture
async def sample_user(async_session: AsyncSession) -> User:
    """An editor allowed to run bulk uploads."""
    user = User(id=uuid.uuid4(), username="testeditor", email="editor@test.com", role="editor")
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user


@pytest.fixture
def editor_token(settings: Settings) -> str:
    """JWT access token for the sample editor."""
    return create_access_token(
        subject="testeditor",
        role="editor",
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


@pytest.fixture
def make_constituency_row() -> RowFactory:
    """Build a valid constituency row as raw text, overridable per field."""

    def _make(constituency_number: int = 1, **overrides: object) -> dict[str, str]:
        row: dict[str, object] = {
            "election": 7,
            "election_year": 1996,
            "constituency_number": constituency_number,
            "constituency_name": f"constituency-{constituency_number}",
            "total_voters": 100000,
            "total_centers": 50,
            "reported_centers": 50,
            "suspended_centers": 0,
            "total_valid_votes": 75000,
            "cancelled_votes": 1000,
            "total_turnout": 76000,
            "percent_turnout": 76.0,
            "candidate_1": "Candidate A",
            "party_1": "Party A",
            "symbol_1": "Boat",
            "vote_1": 45000,
            "percent_1": 60.0,
            "candidate_2": "Candidate B",
            "party_2": "Party B",
            "symbol_2": "Sheaf",
            "vote_2": 30000,
            "percent_2": 40.0,
        }
        row.update(overrides)
        return {k: "" if v is None else str(v) for k, v in row.items()}

    return _make


@pytest.fixture
def make_center_row() -> RowFactory:
    """Build a valid polling-center row as raw text, overridable per field."""

    def _make(center_no: int = 1, **overrides: object) -> dict[str, str]:
        row: dict[str, object] = {
            "election": 11,
            "election_year": 2018,
            "constituency_id": 1,
            "constituency_name": "constituency-1",
            "center_no": center_no,
            "center": f"Center {center_no}",
            "gender": "both",
            "lat": 23.81,
            "lon": 90.41,
            "map_link": "",
            "total_voters": 3000,
            "total_valid_votes": 2100,
            "total_invalid_votes": 50,
            "total_votes_cast": 2150,
            "turnout_percentage": 71.67,
            "participant_1_name": "Participant A",
            "participant_1_symbol": "Boat",
            "participant_1_vote": 1200,
            "participant_2_name": "Participant B",
            "participant_2_symbol": "Sheaf",
            "participant_2_vote": 900,
        }
        row.update(overrides)
        return {k: "" if v is None else str(v) for k, v in row.items()}

    return _make


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[list[dict[str, str]], str], Path]:
    """Write rows to a CSV file under tmp_path and return its path."""

    def _write(rows: list[dict[str, str]], name: str = "results.csv") -> Path:
        path = tmp_path / name
        pd.DataFrame(rows).to_csv(path, index=False)
        return path

    return _write
