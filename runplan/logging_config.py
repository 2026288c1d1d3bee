"""Logging setup shared by the API, the CLI scripts and the test suite."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from pathlib import Path

from pydantic import ValidationError

from runplan.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILE_NAME = "runplan.log"

# Library loggers pinned regardless of LOG_LEVEL.
QUIET_LOGGERS = {
    "sqlalchemy.engine": "WARNING",  # SQL echo goes through settings.debug
    "filelock": "WARNING",  # acquire/release on every plan generation
    "alembic.runtime.migration": "INFO",
}

_configured = False


def build_logging_config(log_dir: Path, level: str) -> dict:
    """dictConfig payload: console and ``runplan.log`` handlers on the root logger."""
    loggers = {name: {"level": quiet} for name, quiet in QUIET_LOGGERS.items()}
    loggers["runplan"] = {"level": level}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": level,
            },
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / LOG_FILE_NAME),
                "encoding": "utf-8",
                "formatter": "standard",
                "level": level,
            },
        },
        "root": {"level": level, "handlers": ["console", "file"]},
        "loggers": loggers,
    }


def _resolve_destination(level_override: str | None) -> tuple[Path, str]:
    try:
        settings = get_settings()
        log_dir, level = settings.log_dir, settings.log_level
    except ValidationError:
        # Invalid environment; log with defaults so the validation error itself is visible.
        log_dir, level = Path("logs"), "INFO"
    if level_override:
        level = level_override.upper()
    return log_dir, level


def configure_logging(level: str | None = None) -> None:
    """
    Configure logging once per process.

    Args:
        level: Overrides ``LOG_LEVEL`` (the CLI passes ``DEBUG`` for ``--verbose``)
    """
    global _configured
    if _configured:
        return

    log_dir, resolved = _resolve_destination(level)
    log_dir.mkdir(parents=True, exist_ok=True)
    dictConfig(build_logging_config(log_dir, resolved))
    logging.getLogger(__name__).debug("Logging configured | level=%s | dir=%s", resolved, log_dir)
    _configured = True
