"""Skill discovery and tool execution core for the agent runtime."""

__version__ = "0.1.0"
