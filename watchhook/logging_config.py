"""
Logging configuration for the watchhook command line
"""

import logging
import logging.config
from typing import Any, Dict

NOISY_LOGGERS = ("kubernetes", "urllib3")


class ClientNoiseFilter(logging.Filter):
    """Filter to suppress chatty HTTP client records below WARNING."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        """Drop kubernetes/urllib3 records unless running at DEBUG."""
        if self.level <= logging.DEBUG:
            return True
        if record.name.split(".")[0] in NOISY_LOGGERS:
            return record.levelno >= logging.WARNING
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration for the given level name."""
    level = level.upper()
    numeric_level = logging.getLevelName(level)
    if not isinstance(numeric_level, int):
        raise ValueError(f"unknown log level: {level}")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "client_noise_filter": {
                "()": ClientNoiseFilter,
                "level": numeric_level,
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
                "filters": ["client_noise_filter"],
            },
        },
        "loggers": {
            "watchhook": {
                "handlers": ["default"],
                "level": level,
                "propagate": False,
            },
        },
        "root": {
            "level": level,
            "handlers": ["default"],
        },
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration."""
    logging.config.dictConfig(get_logging_config(level))
