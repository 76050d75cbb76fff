"""Structured Logging - one JSON object per log line, configured once from the lifespan.

Invariants:
    - Every line has timestamp, level, logger and message
    - Known extra= keys (error codes, entities, actors, report details) are copied
      through when set; unknown extras are ignored
    - setup_logging() is idempotent: it replaces its own handler, never stacks them

Design Decisions:
    - stdlib logging with a custom Formatter: services only ever call
      logging.getLogger(__name__) and pass structured fields via extra=
    - log_format="text" keeps a plain single-line format for local runs
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "error_code", "path", "entity_type", "entity_id", "actor",
    "action", "report_type", "report_format", "duration_ms",
)

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_HANDLER_NAME = "sis-root"


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
    return handler
