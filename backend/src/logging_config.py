"""Central logging configuration for the scheduler backend."""

from __future__ import annotations

import logging
import logging.config
import os
from typing import Optional


_CONFIGURED = False


def configure_logging(default_level: Optional[str] = None) -> None:
    """Send application and uvicorn logs to stdout with one formatter."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    level_name = (default_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    formatter = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    uvicorn_logger = {
        "level": level_name,
        "handlers": ["stdout"],
        "propagate": False,
    }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": formatter,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                }
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {
                "level": level_name,
                "handlers": ["stdout"],
            },
            "loggers": {
                "uvicorn": dict(uvicorn_logger),
                "uvicorn.error": dict(uvicorn_logger),
                "uvicorn.access": dict(uvicorn_logger),
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )

    _CONFIGURED = True
