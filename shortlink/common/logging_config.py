"""Logging setup for the shortlink package.

Log records go to stderr (and optionally a file) so that stdout carries only
the CLI's JSON output.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

LOGGER_NAME = "shortlink"

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record; the message is escaped, not templated."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the package logger.

    Calling this again replaces the handlers, so repeated CLI runs in one
    process do not duplicate output.

    Args:
        level: Level name; unknown names mean INFO
        log_file: Also append records to this file
        json_format: Emit JSON lines instead of text

    Returns:
        The "shortlink" logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if json_format:
        formatter: logging.Formatter = JsonLineFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    logger.setLevel(numeric_level)
    logger.propagate = False
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
