"""Loguru sink configuration for the API server and the CLI.

Console output is either a single-line text format or, with
``json_logs``, one serialized JSON record per line for log shippers.
The optional file sink always uses the text format.
"""

import sys
from pathlib import Path

from loguru import logger

_TEXT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"
LOG_FILE_NAME = "results-api.log"


def setup_logging(log_level: str = "INFO", log_dir: str | None = None, *, json_logs: bool = False) -> None:
    """Replace all Loguru sinks with the configured ones.

    Args:
        log_level: Minimum level, case-insensitive.
        log_dir: When set, also log to ``<log_dir>/results-api.log``,
            rotated daily and kept for a week.
        json_logs: Serialize console records as JSON instead of text.
    """
    level = log_level.upper()
    logger.remove()
    if json_logs:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=_TEXT_FORMAT)

    if log_dir is None:
        return
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path / LOG_FILE_NAME,
        level=level,
        format=_TEXT_FORMAT,
        rotation="24h",
        retention="7 days",
    )
