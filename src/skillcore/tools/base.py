"""Tooling abstractions used by the agent."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from skillcore.models.llm import ToolDefinition
from skillcore.observability.error_codes import ErrorCode


class ToolError(RuntimeError):
    """Raised when a tool call fails."""


class ToolResult(BaseModel):
    """Outcome of one tool invocation.

    ``success`` means ``content`` is meaningful, a failure means ``error`` is;
    either side may still carry partial ``content`` or ``data``.
    """

    success: bool
    content: str = ""
    error: str | None = None
    data: dict[str, Any] | None = None
    error_code: ErrorCode | None = None
    fallback_used: bool = False

    @classmethod
    def failure(
        cls,
        error: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        *,
        content: str = "",
    ) -> ToolResult:
        return cls(success=False, error=error, error_code=code, content=content)


class Tool(ABC):
    """Abstract base class for agent tools."""

    name: str
    description: str
    category: str = "domain"
    parameters: dict[str, Any] = {"type": "object", "properties": {}}

    @abstractmethod
    async def run(self, **kwargs: Any) -> ToolResult | str:
        """Execute the tool and return the result."""

    def definition(self) -> ToolDefinition:
        """Describe this tool for the model."""

        return ToolDefinition(
            name=self.name, description=self.description, parameters=dict(self.parameters)
        )


__all__ = ["Tool", "ToolError", "ToolResult"]
