"""Tests for the logging configuration payload."""
from pathlib import Path

from runplan.config import get_settings
from runplan.logging_config import LOG_FILE_NAME, QUIET_LOGGERS, _resolve_destination, build_logging_config


def test_handlers_share_level_and_log_file(tmp_path: Path):
    config = build_logging_config(tmp_path, "DEBUG")

    assert config["root"] == {"level": "DEBUG", "handlers": ["console", "file"]}
    assert config["handlers"]["file"]["filename"] == str(tmp_path / LOG_FILE_NAME)
    assert {h["level"] for h in config["handlers"].values()} == {"DEBUG"}


def test_library_loggers_stay_quiet_at_debug(tmp_path: Path):
    loggers = build_logging_config(tmp_path, "DEBUG")["loggers"]

    assert loggers["runplan"] == {"level": "DEBUG"}
    for name, level in QUIET_LOGGERS.items():
        assert loggers[name] == {"level": level}
    assert loggers["filelock"] == {"level": "WARNING"}


def test_level_override_wins_over_settings():
    _, level = _resolve_destination("debug")
    assert level == "DEBUG"

    _, level = _resolve_destination(None)
    assert level == get_settings().log_level
