"""OpenTelemetry tracing helpers.

Only the OpenTelemetry API is required. Without an SDK tracer provider the
API hands out non-recording spans, so every helper here is safe to call in
tests and command line tools.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

_TRACER_NAME = "skillcore"


def get_tracer() -> trace.Tracer:
    """Return the tracer used by the runtime."""

    return trace.get_tracer(_TRACER_NAME)


def _clean_attributes(attributes: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, value in attributes.items():
        if value is None:
            continue
        if isinstance(value, str | bool | int | float):
            cleaned[key] = value
        else:
            cleaned[key] = str(value)
    return cleaned


@contextmanager
def start_span(name: str, *, attributes: dict[str, Any] | None = None) -> Iterator[Span]:
    """Context manager to create and activate a span with optional attributes."""

    with get_tracer().start_as_current_span(name) as span:
        if attributes:
            span.set_attributes(_clean_attributes(attributes))
        yield span


def set_span_attributes(attributes: dict[str, Any]) -> None:
    """Attach attributes to the currently active span."""

    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(_clean_attributes(attributes))


def set_span_status(status: str, description: str | None = None) -> None:
    """Mark the current span as ``OK`` or ``ERROR``."""

    span = trace.get_current_span()
    if not span.is_recording():
        return
    if status.upper() == "ERROR":
        span.set_status(Status(StatusCode.ERROR, description))
    else:
        span.set_status(Status(StatusCode.OK))


def current_trace_ids() -> dict[str, str]:
    """Return the current trace and span identifiers if available."""

    context = trace.get_current_span().get_span_context()
    if not context or not context.is_valid:
        return {}
    return {
        "trace_id": format(context.trace_id, "032x"),
        "span_id": format(context.span_id, "016x"),
    }


__all__ = [
    "current_trace_ids",
    "get_tracer",
    "set_span_attributes",
    "set_span_status",
    "start_span",
]
