"""Tools available to the agent."""

from .base import Tool, ToolError, ToolResult
from .registry import ToolRegistry

__all__ = ["Tool", "ToolError", "ToolRegistry", "ToolResult"]
