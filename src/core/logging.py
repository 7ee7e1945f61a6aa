"""Structured log formatting."""
import json
import logging
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON line for the rotating file handler."""

    def format(self, record):
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)
