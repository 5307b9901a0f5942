"""Database migration CLI commands using Alembic programmatically."""

import os

import typer
from alembic import command
from alembic.config import Config
from loguru import logger

db_app = typer.Typer()


def _config() -> Config:
    return Config(os.environ.get("ALEMBIC_CONFIG", "alembic.ini"))


@db_app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Target revision"),
) -> None:
    """Create or migrate the results tables up to the target revision."""
    logger.info(f"Upgrading database to {revision}")
    command.upgrade(_config(), revision)
    logger.info("Database upgrade complete")


@db_app.command()
def downgrade(
    revision: str = typer.Argument("-1", help="Target revision"),
) -> None:
    """Roll the schema back to the target revision."""
    logger.info(f"Downgrading database to {revision}")
    command.downgrade(_config(), revision)
    logger.info("Database downgrade complete")
