"""
Centralized Logging

Architectural Intent:
- Provides structured JSON logging for all hostforge components
- Centralizes log configuration under the "hostforge" logger
- Level and format come from HostforgeConfig (log_level, log_json)
- JSON records carry the host name when the call site supplies one
"""

import json
import logging
import sys
from datetime import datetime, UTC


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # lifecycle logs pass extra={"host": name}
        host = getattr(record, "host", None)
        if host:
            log_entry["host"] = host
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def parse_level(name: str) -> int:
    """Map a level name like 'debug' to its logging constant, default WARNING."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(
    level: int = logging.INFO,
    json_format: bool = False,
) -> None:
    """Configure logging for hostforge.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, etc.)
        json_format: If True, use JSON structured output. Otherwise human-readable.
    """
    root = logging.getLogger("hostforge")
    root.setLevel(level)

    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )

    root.addHandler(handler)
