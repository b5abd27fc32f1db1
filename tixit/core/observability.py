"""Logging setup: JSON lines in production, plain text for local runs."""

import json
import logging
from datetime import datetime, timezone

# Extra fields surfaced by the JSON formatter when a call passes them via ``extra=``.
_EXTRA_KEYS = ("user_id", "ticket_id", "bucket", "client", "field", "path", "error_code")


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Configure the root logger once; repeated calls are no-ops."""
    root = logging.getLogger()
    if getattr(root, "_tixit_configured", False):
        return
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root._tixit_configured = True
