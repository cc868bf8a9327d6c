"""Result types produced by the execution engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from skillcore.models.llm import ToolCall, Usage
from skillcore.tools.base import ToolResult


@dataclass(slots=True)
class ExecutionResult:
    """One tool call together with its outcome and timing.

    ``error`` holds the exception when the call itself failed (middleware
    veto, timeout, a raising tool). A tool that ran and reported failure has
    ``error`` unset and ``result.success`` False.
    """

    tool_call: ToolCall
    result: ToolResult | None = None
    error: BaseException | None = None
    duration: float = 0.0
    executed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.result is not None and self.result.success


@dataclass(slots=True)
class ConversationResponse:
    """Outcome of a tool-calling conversation turn."""

    content: str
    usage: Usage | None = None
    steps: int = 0
    tool_results: list[ExecutionResult] = field(default_factory=list)
    chain_depth: int = 0
    depth_limited: bool = False


__all__ = ["ConversationResponse", "ExecutionResult"]
