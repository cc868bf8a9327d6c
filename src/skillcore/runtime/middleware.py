"""Middleware pipeline around each tool call.

``before_execution`` hooks run in registration order and may veto a call by
raising. ``after_execution`` hooks observe the finished
:class:`ExecutionResult`; they are not meant to change it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from skillcore.models.events import ToolCallEvent, TraceContext
from skillcore.models.llm import ToolCall
from skillcore.observability.logging import log_event
from skillcore.observability.tracing import current_trace_ids
from skillcore.runtime.errors import MiddlewareRejectedError
from skillcore.runtime.models import ExecutionResult

LOGGER = logging.getLogger(__name__)

OUTPUT_PREVIEW_CHARS = 200


class Middleware:
    """Base class with no-op hooks."""

    async def before_execution(self, call: ToolCall) -> None:
        """Raise to prevent ``call`` from running."""

    async def after_execution(self, call: ToolCall, result: ExecutionResult) -> None:
        """Observe the outcome of ``call``."""


class LoggingMiddleware(Middleware):
    """Log tool start and emit a :class:`ToolCallEvent` on completion."""

    async def before_execution(self, call: ToolCall) -> None:
        LOGGER.info("Executing tool: %s", call.name)

    async def after_execution(self, call: ToolCall, result: ExecutionResult) -> None:
        preview: str | None = None
        error_code: str | None = None
        if result.result is not None:
            preview = (result.result.content or result.result.error or "")[:OUTPUT_PREVIEW_CHARS]
            if result.result.error_code is not None:
                error_code = result.result.error_code.value

        LOGGER.info(
            "Tool %s completed: success=%s duration=%.3fs",
            call.name,
            result.succeeded,
            result.duration,
        )
        log_event(
            ToolCallEvent(
                name=call.name,
                args=call.args,
                status="ok" if result.succeeded else "error",
                duration_ms=result.duration * 1000,
                output_preview=preview,
                error_code=error_code,
                trace=TraceContext(**current_trace_ids()),
            )
        )


class SecurityMiddleware(Middleware):
    """Reject tools that are not on the allow-list. An empty list allows everything."""

    def __init__(self, allowed_tools: Iterable[str] = ()) -> None:
        self.allowed_tools = frozenset(allowed_tools)

    async def before_execution(self, call: ToolCall) -> None:
        if self.allowed_tools and call.name not in self.allowed_tools:
            raise MiddlewareRejectedError(f"tool '{call.name}' not allowed by security policy")


class MetricsMiddleware(Middleware):
    """Accumulate per-tool call counts and durations in process."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._durations: dict[str, float] = {}

    async def after_execution(self, call: ToolCall, result: ExecutionResult) -> None:
        self._counts[call.name] = self._counts.get(call.name, 0) + 1
        self._durations[call.name] = self._durations.get(call.name, 0.0) + result.duration

    def get_metrics(self) -> dict[str, dict[str, float]]:
        """Return ``{tool: {count, total_duration, average_duration}}`` in seconds."""

        return {
            name: {
                "count": count,
                "total_duration": self._durations[name],
                "average_duration": self._durations[name] / count,
            }
            for name, count in self._counts.items()
        }


__all__ = ["LoggingMiddleware", "MetricsMiddleware", "Middleware", "SecurityMiddleware"]
