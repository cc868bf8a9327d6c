"""Tests for logging, tracing and error code helpers."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest
from opentelemetry import trace
from opentelemetry.trace import NonRecordingSpan, SpanContext

from skillcore.models.events import ConversationEvent, ToolCallEvent, TraceContext
from skillcore.observability.error_codes import (
    ERROR_METADATA,
    ErrorCode,
    ErrorSeverity,
    format_error_for_ai,
    get_error_info,
)
from skillcore.observability.logging import EVENT_LOGGER_NAME, log_event, setup_logging
from skillcore.observability.metrics import record_skill_execution, record_tool_call
from skillcore.observability.tracing import (
    current_trace_ids,
    set_span_attributes,
    set_span_status,
    start_span,
)


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogging:
    def test_log_event_carries_payload(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger=EVENT_LOGGER_NAME)

        log_event(
            ToolCallEvent(
                name="skill_mail",
                args={"action": "search"},
                status="ok",
                trace=TraceContext(trace_id="abc", span_id="def"),
            )
        )

        [record] = caplog.records
        assert record.getMessage() == "Event: ToolCallEvent"
        assert record.event_type == "ToolCallEvent"
        assert record.event_data == {
            "name": "skill_mail",
            "args": {"action": "search"},
            "status": "ok",
        }
        assert record.trace_id == "abc"
        assert record.span_id == "def"

    def test_log_event_without_trace(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger=EVENT_LOGGER_NAME)

        log_event(ConversationEvent(steps=2, chain_depth=0))

        [record] = caplog.records
        assert record.event_data["steps"] == 2
        assert not hasattr(record, "trace_id")

    def test_json_output(
        self, restore_root_logger: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        setup_logging("INFO", "skill-runtime", log_format="json")

        logging.getLogger("skillcore.test").info("hello %s", "world")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["message"] == "hello world"
        assert payload["level"] == "INFO"
        assert payload["service"] == "skill-runtime"
        assert payload["name"] == "skillcore.test"
        assert "timestamp" in payload

    def test_text_format_uses_rich(self, restore_root_logger: None) -> None:
        from rich.logging import RichHandler

        setup_logging("debug", log_format="text")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert [type(handler) for handler in root.handlers] == [RichHandler]


class TestTracing:
    def test_helpers_are_safe_without_sdk(self) -> None:
        with start_span("tool.call.alpha", attributes={"tool.args": {"q": 1}, "empty": None}):
            set_span_attributes({"tool.name": "alpha"})
            set_span_status("ERROR", "boom")

        record_tool_call("alpha", 0.1, success=False)
        record_skill_execution("mail", "script", True)

    def test_current_trace_ids(self) -> None:
        assert current_trace_ids() == {}

        context = SpanContext(trace_id=1, span_id=2, is_remote=False)
        with trace.use_span(NonRecordingSpan(context)):
            ids = current_trace_ids()

        assert ids == {"trace_id": f"{1:032x}", "span_id": f"{2:016x}"}


class TestErrorCodes:
    def test_every_code_has_metadata(self) -> None:
        for code in ErrorCode:
            assert get_error_info(code).code == code.value

    def test_format_error_for_ai(self) -> None:
        payload = format_error_for_ai(ErrorCode.SKILL_TIMEOUT, "skill execution timed out after 5s")

        assert payload["error_code"] == "SKILL_TIMEOUT"
        assert payload["severity"] == ErrorSeverity.WARNING.value
        assert payload["category"] == "skill"
        assert payload["context"] == "skill execution timed out after 5s"
        assert payload["recovery_hint"] == ERROR_METADATA[ErrorCode.SKILL_TIMEOUT].recovery_hint

    def test_format_error_without_context(self) -> None:
        assert "context" not in format_error_for_ai(ErrorCode.UNKNOWN)
