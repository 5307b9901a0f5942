"""Tests for the upload and template CLI commands."""

import asyncio
import re
from pathlib import Path

import pandas as pd
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from typer.testing import CliRunner

from results_api.cli.app import app
from results_api.models.base import Base

runner = CliRunner()


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


async def _create_tables(url: str) -> None:
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> str:
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters-long")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    return url


class TestTemplateCommand:
    def test_writes_csv_template(self, cli_env: str, tmp_path: Path) -> None:
        result = runner.invoke(app, ["template", "center", "--output-dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        written = tmp_path / "center_results_template.csv"
        assert written.exists()
        assert "center_no" in pd.read_csv(written).columns

    def test_writes_excel_template(self, cli_env: str, tmp_path: Path) -> None:
        result = runner.invoke(app, ["template", "constituency", "--format", "excel", "--output-dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "constituency_results_template.xlsx").exists()


class TestUploadCommand:
    def test_processes_file_and_keeps_original(self, cli_env: str, tmp_path: Path, make_constituency_row) -> None:
        asyncio.run(_create_tables(cli_env))
        source = tmp_path / "results.csv"
        pd.DataFrame([make_constituency_row(1), make_constituency_row(2, total_voters="")]).to_csv(source, index=False)

        result = runner.invoke(app, ["upload", str(source), "--type", "constituency", "--year", "1996"])

        output = _strip_ansi(result.output)
        assert result.exit_code == 0, output
        assert "Upload completed" in output
        assert re.search(r"Inserted:\s+1", output)
        assert re.search(r"Failed:\s+1", output)
        assert "row 2: total_voters is required" in output
        assert source.exists()

    def test_rejects_unsupported_extension(self, cli_env: str, tmp_path: Path) -> None:
        source = tmp_path / "results.txt"
        source.write_text("a\n1\n")

        result = runner.invoke(app, ["upload", str(source), "--type", "center", "--year", "2018"])

        assert result.exit_code == 2
