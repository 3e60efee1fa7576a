from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from typing import Any

DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"


def _logging_dict(level_name: str, log_file: str | None) -> dict[str, Any]:
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        }
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "default",
            "filename": log_file,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": DEFAULT_FORMAT}},
        "handlers": handlers,
        "root": {"level": level_name, "handlers": list(handlers)},
    }


def resolve_level_name(level_name: str | int | None) -> str:
    """Map a level name, number or None (LOG_LEVEL env, then INFO) to a valid level name."""
    if level_name is None:
        level_name = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level_name, int):
        return logging.getLevelName(level_name)
    level_name = level_name.upper()
    if not isinstance(logging.getLevelName(level_name), int):
        return "INFO"
    return level_name


def configure_logging(level_name: str | int | None = None, log_file: str | None = None) -> None:
    """Configure logging for the simulation.

    Handlers accept everything; the root logger decides the effective level.
    """
    resolved = resolve_level_name(level_name)
    dictConfig(_logging_dict(resolved, log_file))
    logging.getLogger().setLevel(resolved)
