"""OpenTelemetry metrics for tool and skill execution.

Instruments are created against the global meter provider. Without an SDK
provider the API returns no-op instruments, so recording is always safe.
"""

from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("skillcore")

tool_call_counter = _meter.create_counter(
    name="agent.tools.calls.total",
    description="Total number of tool calls",
    unit="1",
)
tool_error_counter = _meter.create_counter(
    name="agent.tools.calls.errors",
    description="Total number of failed tool calls",
    unit="1",
)
tool_call_duration_histogram = _meter.create_histogram(
    name="agent.tools.calls.duration",
    description="Tool call duration",
    unit="ms",
)
skill_execution_counter = _meter.create_counter(
    name="agent.skills.executions.total",
    description="Total number of skill executions",
    unit="1",
)


def record_tool_call(name: str, duration_s: float, success: bool) -> None:
    """Record one completed tool call."""

    attributes = {"tool.name": name, "tool.success": str(success).lower()}
    tool_call_counter.add(1, attributes)
    tool_call_duration_histogram.record(duration_s * 1000.0, attributes)
    if not success:
        tool_error_counter.add(1, {"tool.name": name})


def record_skill_execution(skill: str, method: str, success: bool) -> None:
    """Record one completed skill execution."""

    skill_execution_counter.add(
        1,
        {"skill.name": skill, "skill.method": method, "skill.success": str(success).lower()},
    )


__all__ = ["record_skill_execution", "record_tool_call"]
