"""Error codes attached to failed tool and skill results.

A failed :class:`~skillcore.tools.base.ToolResult` carries one of these codes
so that logs, metrics and the command line can tell a timeout from a missing
skill without parsing the error text.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class ErrorSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ErrorInfo(NamedTuple):
    code: str
    severity: ErrorSeverity
    category: str
    description: str
    recovery_hint: str


class ErrorCode(str, Enum):
    """``<CATEGORY>_<ERROR>`` with category ``TOOL`` or ``SKILL``, plus ``UNKNOWN``."""

    # ---- Tool Errors ----
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    TOOL_EXECUTION_FAILED = "TOOL_EXECUTION_FAILED"
    TOOL_TIMEOUT = "TOOL_TIMEOUT"
    TOOL_INVALID_ARGS = "TOOL_INVALID_ARGS"

    # ---- Skill Errors ----
    SKILL_NOT_FOUND = "SKILL_NOT_FOUND"
    SKILL_DISABLED = "SKILL_DISABLED"
    SKILL_ACTION_NOT_ALLOWED = "SKILL_ACTION_NOT_ALLOWED"
    SKILL_NO_SCRIPT = "SKILL_NO_SCRIPT"
    SKILL_EXECUTION_FAILED = "SKILL_EXECUTION_FAILED"
    SKILL_TIMEOUT = "SKILL_TIMEOUT"

    # ---- Generic Errors ----
    UNKNOWN = "UNKNOWN"


ERROR_METADATA: dict[ErrorCode, ErrorInfo] = {
    ErrorCode.TOOL_NOT_FOUND: ErrorInfo(
        code="TOOL_NOT_FOUND",
        severity=ErrorSeverity.ERROR,
        category="tool",
        description="Requested tool does not exist in the registry",
        recovery_hint="Check the tool name against the advertised tool list",
    ),
    ErrorCode.TOOL_EXECUTION_FAILED: ErrorInfo(
        code="TOOL_EXECUTION_FAILED",
        severity=ErrorSeverity.ERROR,
        category="tool",
        description="Tool execution raised an exception",
        recovery_hint="Check tool arguments and retry with corrected parameters",
    ),
    ErrorCode.TOOL_TIMEOUT: ErrorInfo(
        code="TOOL_TIMEOUT",
        severity=ErrorSeverity.WARNING,
        category="tool",
        description="Tool execution exceeded the turn deadline",
        recovery_hint="Simplify the request or raise tool_timeout_seconds",
    ),
    ErrorCode.TOOL_INVALID_ARGS: ErrorInfo(
        code="TOOL_INVALID_ARGS",
        severity=ErrorSeverity.ERROR,
        category="tool",
        description="Invalid arguments provided to tool",
        recovery_hint="Check required parameters and their types",
    ),
    ErrorCode.SKILL_NOT_FOUND: ErrorInfo(
        code="SKILL_NOT_FOUND",
        severity=ErrorSeverity.ERROR,
        category="skill",
        description="Requested skill is not among the available skills",
        recovery_hint="Run the status command to see unavailable skills and why",
    ),
    ErrorCode.SKILL_DISABLED: ErrorInfo(
        code="SKILL_DISABLED",
        severity=ErrorSeverity.WARNING,
        category="skill",
        description="The skills system is disabled",
        recovery_hint="Set AGENT_SKILLS_ENABLED=true",
    ),
    ErrorCode.SKILL_ACTION_NOT_ALLOWED: ErrorInfo(
        code="SKILL_ACTION_NOT_ALLOWED",
        severity=ErrorSeverity.ERROR,
        category="skill",
        description="Action is not on the skill's allow-list",
        recovery_hint="Pick one of the allowed actions for this skill",
    ),
    ErrorCode.SKILL_NO_SCRIPT: ErrorInfo(
        code="SKILL_NO_SCRIPT",
        severity=ErrorSeverity.ERROR,
        category="skill",
        description="No script in the skill matches the requested action",
        recovery_hint="Use an action named after one of the skill's scripts",
    ),
    ErrorCode.SKILL_EXECUTION_FAILED: ErrorInfo(
        code="SKILL_EXECUTION_FAILED",
        severity=ErrorSeverity.ERROR,
        category="skill",
        description="Skill process exited with a non-zero status",
        recovery_hint="Inspect the captured output for the failure reason",
    ),
    ErrorCode.SKILL_TIMEOUT: ErrorInfo(
        code="SKILL_TIMEOUT",
        severity=ErrorSeverity.WARNING,
        category="skill",
        description="Skill process exceeded its timeout and was killed",
        recovery_hint="Narrow the request or raise skill_timeout_seconds",
    ),
    ErrorCode.UNKNOWN: ErrorInfo(
        code="UNKNOWN",
        severity=ErrorSeverity.ERROR,
        category="unknown",
        description="An unexpected error occurred",
        recovery_hint="Check logs for detailed error message",
    ),
}


def get_error_info(code: ErrorCode) -> ErrorInfo:
    return ERROR_METADATA.get(code, ERROR_METADATA[ErrorCode.UNKNOWN])


def format_error_for_ai(code: ErrorCode, context: str | None = None) -> dict[str, str]:
    """Describe ``code`` as a flat mapping, with the error text as ``context``."""

    info = get_error_info(code)
    payload = {"error_code": info.code, "severity": info.severity.value}
    payload.update(
        category=info.category,
        description=info.description,
        recovery_hint=info.recovery_hint,
    )
    if context:
        payload["context"] = context
    return payload


__all__ = [
    "ERROR_METADATA",
    "ErrorCode",
    "ErrorInfo",
    "ErrorSeverity",
    "format_error_for_ai",
    "get_error_info",
]
