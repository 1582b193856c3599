"""
Logging configuration shared by the library and the demo server.

Session activity is logged under the "crumb" logger. Access log lines for
noisy paths (health checks by default) can be silenced.
"""

import logging
import logging.config
from typing import Any, Dict, Iterable, Optional

DEFAULT_QUIET_PATHS = ("/health",)


class QuietPathFilter(logging.Filter):
    """Drop uvicorn access log records for the given request paths."""

    def __init__(self, paths: Iterable[str] = DEFAULT_QUIET_PATHS):
        super().__init__()
        self.paths = tuple(paths)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access" or not self.paths:
            return True

        # uvicorn passes (client, method, path, http_version, status) as args
        args = record.args if isinstance(record.args, tuple) else ()
        if len(args) >= 3:
            path = str(args[2]).split("?", 1)[0]
            return path not in self.paths

        message = record.getMessage()
        return not any(f" {path} " in message or f" {path}?" in message for path in self.paths)


def get_logging_config(
    level: str = "INFO", quiet_paths: Optional[Iterable[str]] = None
) -> Dict[str, Any]:
    """
    Build a dictConfig for crumb and uvicorn.

    Args:
        level: Level for the crumb and root loggers
        quiet_paths: Request paths whose access log lines are dropped
    """
    level = level.upper()
    paths = DEFAULT_QUIET_PATHS if quiet_paths is None else tuple(quiet_paths)
    console = {
        "class": "logging.StreamHandler",
        "stream": "ext://sys.stdout",
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "quiet_paths": {"()": QuietPathFilter, "paths": paths},
        },
        "formatters": {
            "session": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "console": {**console, "formatter": "session"},
            "access": {**console, "formatter": "access", "filters": ["quiet_paths"]},
        },
        "loggers": {
            "crumb": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn": {"handlers": ["console"], "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
        },
        "root": {"level": level, "handlers": ["console"]},
    }


def configure_logging(level: str = "INFO", quiet_paths: Optional[Iterable[str]] = None) -> None:
    """Apply the logging configuration."""
    logging.config.dictConfig(get_logging_config(level, quiet_paths))
