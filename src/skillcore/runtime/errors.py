"""Exceptions raised by the execution engine."""

from __future__ import annotations

from skillcore.tools.base import ToolError


class ToolTimeoutError(ToolError):
    """Raised when a tool call exceeds the batch deadline."""


class MiddlewareRejectedError(ToolError):
    """Raised when a middleware pre-hook vetoes a tool call."""


class ConversationError(RuntimeError):
    """Raised when the model provider fails during a tool-calling turn."""


__all__ = ["ConversationError", "MiddlewareRejectedError", "ToolTimeoutError"]
