"""Logging configuration and event emission.

Production output is one JSON object per line on stdout. ``log_format="text"``
(or ``LOG_FORMAT=text``) switches to a rich console handler for local use.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any

from pythonjsonlogger import jsonlogger

from skillcore.models.events import ConversationEvent, SkillExecutionEvent, ToolCallEvent

LoggableEvent = ToolCallEvent | SkillExecutionEvent | ConversationEvent

EVENT_LOGGER_NAME = "skillcore.events"
JSON_FIELDS = "%(timestamp)s %(level)s %(name)s %(message)s"
QUIET_LOGGERS: tuple[str, ...] = ("asyncio",)

EVENT_LOGGER = logging.getLogger(EVENT_LOGGER_NAME)


class SkillJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with an ISO-8601 UTC ``timestamp`` and upper-case ``level``."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        log_record["level"] = str(log_record.get("level") or record.levelname).upper()


def _build_handler(log_format: str, service_name: str) -> logging.Handler:
    if log_format == "json":
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            SkillJsonFormatter(  # type: ignore[no-untyped-call]
                JSON_FIELDS,
                json_ensure_ascii=False,
                static_fields={"service": service_name},
            )
        )
        return handler

    from rich.logging import RichHandler

    # Skill output ends up in log messages; never interpret it as markup.
    return RichHandler(rich_tracebacks=True, markup=False, show_time=True, show_path=False)


def setup_logging(
    level: str = "INFO",
    service_name: str = "skillcore",
    *,
    log_format: str | None = None,
) -> None:
    """Replace the root handlers with a single JSON or rich handler."""

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    fmt = (log_format or os.environ.get("LOG_FORMAT", "json")).lower()
    root_logger.addHandler(_build_handler(fmt, service_name))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_event(event: LoggableEvent) -> None:
    """Log a structured domain event on the ``skillcore.events`` logger.

    The event payload goes to ``event_data``; trace identifiers are promoted
    to top-level ``trace_id``/``span_id`` fields.
    """
    name = type(event).__name__
    payload = event.model_dump(mode="json", exclude_none=True)
    extra: dict[str, Any] = {"event_type": name, "event_data": payload}

    trace = payload.pop("trace", None)
    if trace:
        extra["trace_id"] = trace.get("trace_id")
        extra["span_id"] = trace.get("span_id")

    EVENT_LOGGER.info("Event: %s", name, extra=extra)


__all__ = ["EVENT_LOGGER_NAME", "SkillJsonFormatter", "log_event", "setup_logging"]
