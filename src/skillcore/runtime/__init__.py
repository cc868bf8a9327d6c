"""Tool execution engine, middleware and conversation loop."""

from skillcore.runtime.errors import ConversationError, MiddlewareRejectedError, ToolTimeoutError
from skillcore.runtime.events import ToolEvent, tool_event_callback
from skillcore.runtime.execution import ExecutionEngine
from skillcore.runtime.middleware import (
    LoggingMiddleware,
    MetricsMiddleware,
    Middleware,
    SecurityMiddleware,
)
from skillcore.runtime.models import ConversationResponse, ExecutionResult

__all__ = [
    "ConversationError",
    "ConversationResponse",
    "ExecutionEngine",
    "ExecutionResult",
    "LoggingMiddleware",
    "MetricsMiddleware",
    "Middleware",
    "MiddlewareRejectedError",
    "SecurityMiddleware",
    "ToolEvent",
    "ToolTimeoutError",
    "tool_event_callback",
]
