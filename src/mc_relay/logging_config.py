"""
Logging setup for the relay.

Installs a single stream handler on the ``mc_relay`` package logger. Three
formats are available, selected by ``[logging] format`` / ``RELAY_LOG_FORMAT``:

    simple    "LEVEL message"
    detailed  "time │ LEVEL │ logger │ message"
    json      one JSON object per line, for log shippers

discord.py and uvicorn keep their own loggers; their level follows the same
setting so a DEBUG run is debug everywhere.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

PACKAGE_LOGGER = "mc_relay"
THIRD_PARTY_LOGGERS = ("discord", "uvicorn")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JSONFormatter()
    if fmt == "simple":
        return logging.Formatter("%(levelname)s %(message)s")
    return logging.Formatter(
        fmt="%(asctime)s │ %(levelname)s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    )


def configure_logging(level: str = "INFO", fmt: str = "detailed") -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Level name (``"DEBUG"``, ``"INFO"``, ...).
        fmt: ``"simple"``, ``"detailed"`` or ``"json"``.

    Returns:
        The configured ``mc_relay`` logger.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(numeric_level)
    pkg_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(build_formatter(fmt))
    pkg_logger.addHandler(handler)
    pkg_logger.propagate = False

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(numeric_level)

    return pkg_logger
