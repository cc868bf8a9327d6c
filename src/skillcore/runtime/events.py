"""Per-turn notifications about tool execution.

A callback installed with :func:`tool_event_callback` lives in a
:class:`contextvars.ContextVar`, so concurrent conversation turns each see
only their own listener. Tasks spawned for a parallel batch inherit it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Literal

LOGGER = logging.getLogger(__name__)

ToolEventType = Literal["start", "complete", "error"]


@dataclass(frozen=True, slots=True)
class ToolEvent:
    tool_name: str
    event_type: ToolEventType
    args: dict[str, Any] = field(default_factory=dict)
    result: str = ""
    error: str = ""
    duration: float = 0.0


ToolEventCallback = Callable[[ToolEvent], None]

_callback: ContextVar[ToolEventCallback | None] = ContextVar("tool_event_callback", default=None)


@contextmanager
def tool_event_callback(callback: ToolEventCallback) -> Iterator[None]:
    """Install ``callback`` for tool events raised in the current context."""

    token = _callback.set(callback)
    try:
        yield
    finally:
        _callback.reset(token)


def emit_tool_event(event: ToolEvent) -> None:
    callback = _callback.get()
    if callback is None:
        return
    try:
        callback(event)
    except Exception:
        LOGGER.exception("Tool event callback failed for %s", event.tool_name)


__all__ = ["ToolEvent", "ToolEventCallback", "emit_tool_event", "tool_event_callback"]
