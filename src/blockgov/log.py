"""
BlockGov Logging

Structured JSON logging for the ``blockgov`` logger namespace.

Modules log through ``logging.getLogger(__name__)`` and attach decision
context as extras:

    logger.info("Recorded resolution", extra={"batch_id": ..., "case_id": ...})

configure_logging() installs one handler on the ``blockgov`` logger that
renders every record, and those extras, as a single JSON line.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import IO, Optional

from .config import Settings

ROOT_LOGGER = "blockgov"

EXTRA_FIELDS = ("batch_id", "case_id", "action", "fingerprint", "tab_id")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(
    settings: Optional[Settings] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Configure the ``blockgov`` logger from settings.

    Calling it again replaces the handler it installed before.
    """
    settings = settings or Settings()
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, settings.log_level))

    for handler in list(logger.handlers):
        if getattr(handler, "_blockgov", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    if settings.log_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    handler._blockgov = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
