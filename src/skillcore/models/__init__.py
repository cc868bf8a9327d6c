"""Pydantic models shared across the runtime."""

from skillcore.models.events import (
    ConversationEvent,
    SkillExecutionEvent,
    ToolCallEvent,
    TraceContext,
)
from skillcore.models.llm import (
    ChatMessage,
    GenerateRequest,
    GenerateResponse,
    Provider,
    ToolCall,
    ToolDefinition,
    Usage,
    combine_usage,
)

__all__ = [
    "ChatMessage",
    "ConversationEvent",
    "GenerateRequest",
    "GenerateResponse",
    "Provider",
    "SkillExecutionEvent",
    "ToolCall",
    "ToolCallEvent",
    "ToolDefinition",
    "TraceContext",
    "Usage",
    "combine_usage",
]
