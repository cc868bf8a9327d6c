"""Structured observability schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TraceContext(BaseModel):
    trace_id: str | None = Field(default=None)
    span_id: str | None = Field(default=None)


class ToolCallEvent(BaseModel):
    name: str
    args: dict[str, Any] = Field(default_factory=dict)
    status: str
    duration_ms: float | None = None
    output_preview: str | None = None
    error_code: str | None = None
    trace: TraceContext | None = None


class SkillExecutionEvent(BaseModel):
    skill: str
    action: str
    method: str
    success: bool
    duration_ms: float
    error_code: str | None = None
    trace: TraceContext | None = None


class ConversationEvent(BaseModel):
    steps: int
    chain_depth: int
    depth_limited: bool = False
    tool_calls: int = 0
    total_tokens: int | None = None
    trace: TraceContext | None = None


__all__ = [
    "ConversationEvent",
    "SkillExecutionEvent",
    "ToolCallEvent",
    "TraceContext",
]
