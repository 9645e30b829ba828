"""Structured Logging — JSON or text output for the token store.

Invariants:
    - Every JSON line carries timestamp (record creation, UTC), level, logger, message
    - Only whitelisted extras are emitted: error_code, operation, namespace, foreign_id
    - Token values are never passed as log extras

Design Decisions:
    - Stdlib logging with a small JSON formatter, installed once by token_store_lifespan
"""

import json
import logging
from datetime import datetime, timezone

TOKEN_LOG_FIELDS = ("error_code", "operation", "namespace", "foreign_id")

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, fields: tuple[str, ...] = TOKEN_LOG_FIELDS):
        super().__init__()
        self.fields = fields

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (name, getattr(record, name))
            for name in self.fields
            if getattr(record, name, None) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Attach a stream handler to the root logger and return it for removal."""
    handler = logging.StreamHandler()
    formatter = JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT)
    handler.setFormatter(formatter)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
