"""Logging, tracing, metrics and error codes."""

from skillcore.observability.error_codes import ErrorCode, ErrorSeverity, get_error_info
from skillcore.observability.logging import log_event, setup_logging

__all__ = ["ErrorCode", "ErrorSeverity", "get_error_info", "log_event", "setup_logging"]
