"""Wire models exchanged with the conversation-model provider."""

from __future__ import annotations

from typing import Any, Literal, Protocol

from pydantic import BaseModel, Field


class ToolCall(BaseModel):
    """A single tool invocation requested by the model."""

    id: str = ""
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class ToolDefinition(BaseModel):
    """Tool description advertised to the model."""

    name: str
    description: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_call_id: str | None = None


class Usage(BaseModel):
    """Token usage reported for one model call."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: Usage) -> Usage:
        return Usage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


def combine_usage(first: Usage | None, second: Usage | None) -> Usage | None:
    """Sum two usage records field by field.

    A missing side is treated as the identity, so ``combine_usage(a, None)``
    returns ``a`` and two missing sides return ``None``.
    """

    if first is None:
        return second
    if second is None:
        return first
    return first + second


class GenerateRequest(BaseModel):
    messages: list[ChatMessage] = Field(default_factory=list)
    model: str | None = None
    tools: list[ToolDefinition] = Field(default_factory=list)
    max_tokens: int | None = None


class GenerateResponse(BaseModel):
    content: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    usage: Usage | None = None


class Provider(Protocol):
    """Conversation-model provider consumed by the execution engine."""

    async def generate_response(self, request: GenerateRequest) -> GenerateResponse:
        """Run one model round-trip for ``request``."""
        ...


__all__ = [
    "ChatMessage",
    "GenerateRequest",
    "GenerateResponse",
    "Provider",
    "ToolCall",
    "ToolDefinition",
    "Usage",
    "combine_usage",
]
