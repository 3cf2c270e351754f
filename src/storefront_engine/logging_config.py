from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

from google.cloud import logging as cloud_logging

# Context variable for trace ID
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)

_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging compatible with Cloud Logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        trace_id = trace_id_var.get()
        if trace_id:
            log_obj["logging.googleapis.com/trace"] = trace_id

        # Fields passed through ``extra=`` land directly on the record
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_obj[key] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def setup_logging(
    *,
    environment: str = "dev",
    project_id: str | None = None,
    use_cloud_logging: bool = True,
) -> None:
    """Configure logging for the application.

    Args:
        environment: Environment name (dev, staging, prod)
        project_id: GCP project ID for Cloud Logging
        use_cloud_logging: Whether to use Cloud Logging client
    """
    log_level = logging.DEBUG if environment == "dev" else logging.INFO

    if use_cloud_logging and project_id and environment != "dev":
        client = cloud_logging.Client(project=project_id)
        client.setup_logging(log_level=log_level)
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())

        logging.basicConfig(
            level=log_level,
            handlers=[handler],
        )

    # Set levels for noisy libraries
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def set_trace_id(trace_id: str) -> None:
    """Set the trace ID for the current context."""
    trace_id_var.set(trace_id)


def get_trace_id() -> str | None:
    """Get the trace ID from the current context."""
    return trace_id_var.get()


__all__ = ["setup_logging", "set_trace_id", "get_trace_id", "StructuredFormatter"]
