"""Registry used to discover and invoke available tools."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from skillcore.models.llm import ToolDefinition
from skillcore.observability.error_codes import ErrorCode
from skillcore.tools.base import Tool, ToolResult

LOGGER = logging.getLogger(__name__)


class ToolRegistry:
    """Simple in-memory registry for agent tools."""

    def __init__(self, tools: Iterable[Tool] | None = None) -> None:
        self._tools: dict[str, Tool] = {}
        if tools:
            for tool in tools:
                self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            LOGGER.debug("Replacing registered tool %s", tool.name)
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> Tool | None:
        return self._tools.pop(name, None)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def available(self) -> list[str]:
        return sorted(self._tools)

    def tools(self) -> list[Tool]:
        """Return the registered tool instances."""
        return list(self._tools.values())

    def definitions(self, allowlist: set[str] | None = None) -> list[ToolDefinition]:
        """Describe registered tools for a model request.

        Args:
            allowlist: Optional set of tool names to restrict the listing to.
        """
        return [
            tool.definition()
            for name, tool in sorted(self._tools.items())
            if allowlist is None or name in allowlist
        ]

    async def execute(self, name: str, args: Mapping[str, Any] | None = None) -> ToolResult:
        """Resolve ``name`` and run the tool with ``args``.

        An unknown name is an ordinary failed result. Exceptions raised by the
        tool itself propagate to the caller.
        """
        tool = self._tools.get(name)
        if tool is None:
            LOGGER.warning("Requested tool %s is not registered", name)
            return ToolResult.failure(f"tool '{name}' not found", ErrorCode.TOOL_NOT_FOUND)

        output = await tool.run(**dict(args or {}))
        if isinstance(output, ToolResult):
            return output
        return ToolResult(success=True, content="" if output is None else str(output))


__all__ = ["ToolRegistry"]
