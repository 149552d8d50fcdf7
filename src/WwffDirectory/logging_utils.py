"""Structured logging helpers shared across directory components."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Optional

from .settings import get_settings

__all__ = ["JSONFormatter", "setup_logging"]

LOGGER_NAME = "WwffDirectory"


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        """Render ``record`` as a JSON string including ``extra_fields``."""

        now = datetime.now(timezone.utc)
        payload = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            payload.update(record.extra_fields)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(
    *,
    level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    stream: Optional[IO[str]] = None,
    propagate: bool = False,
) -> logging.Logger:
    """Configure the package logger with a console or JSON handler.

    Unset arguments fall back to :func:`~WwffDirectory.settings.get_settings`.
    Calling it again replaces the handler installed by the previous call.
    """

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()
    use_json = settings.json_logs if json_logs is None else json_logs

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, resolved_level, logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_wwff_managed", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if use_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler._wwff_managed = True  # type: ignore[attr-defined]
    logger.addHandler(handler)

    logger.propagate = propagate
    return logger
