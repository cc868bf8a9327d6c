"""Tool dispatch and the tool-calling conversation loop."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Iterable, Sequence

from skillcore.core.config import EngineConfig
from skillcore.models.events import ConversationEvent, TraceContext
from skillcore.models.llm import (
    ChatMessage,
    GenerateRequest,
    GenerateResponse,
    Provider,
    ToolCall,
    combine_usage,
)
from skillcore.observability.error_codes import ErrorCode
from skillcore.observability.logging import log_event
from skillcore.observability.metrics import record_tool_call
from skillcore.observability.tracing import (
    current_trace_ids,
    set_span_attributes,
    set_span_status,
    start_span,
)
from skillcore.runtime.errors import ConversationError, MiddlewareRejectedError, ToolTimeoutError
from skillcore.runtime.events import ToolEvent, emit_tool_event
from skillcore.runtime.middleware import (
    LoggingMiddleware,
    MetricsMiddleware,
    Middleware,
    SecurityMiddleware,
)
from skillcore.runtime.models import ConversationResponse, ExecutionResult
from skillcore.tools.base import ToolResult
from skillcore.tools.registry import ToolRegistry

LOGGER = logging.getLogger(__name__)


class ExecutionEngine:
    """Run tool calls through the middleware pipeline and drive tool chains.

    A batch of one call runs inline; larger batches run concurrently, at most
    ``config.max_parallel`` at a time, and results keep request order. Every
    batch shares a deadline of ``config.timeout_seconds``.

    Usage:
        engine = ExecutionEngine.with_default_middleware(registry, settings.engine_config())
        reply = await engine.handle_tool_call_flow(provider, request, response)
    """

    def __init__(
        self,
        registry: ToolRegistry,
        config: EngineConfig | None = None,
        *,
        middleware: Iterable[Middleware] = (),
    ) -> None:
        self._registry = registry
        self._config = config or EngineConfig()
        self._middleware: list[Middleware] = list(middleware)

    @classmethod
    def with_default_middleware(
        cls, registry: ToolRegistry, config: EngineConfig | None = None
    ) -> ExecutionEngine:
        """Build an engine with logging, security (if an allow-list is set) and metrics."""

        config = config or EngineConfig()
        engine = cls(registry, config)
        engine.add_middleware(LoggingMiddleware())
        if config.allowed_tools:
            engine.add_middleware(SecurityMiddleware(config.allowed_tools))
        engine.add_middleware(MetricsMiddleware())
        return engine

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def middleware(self) -> list[Middleware]:
        return list(self._middleware)

    def add_middleware(self, middleware: Middleware) -> None:
        self._middleware.append(middleware)

    async def execute_tool_calls(self, calls: Sequence[ToolCall]) -> list[ExecutionResult]:
        """Execute a batch of tool calls; ``result[i]`` belongs to ``calls[i]``."""

        if not calls:
            return []

        deadline = asyncio.get_running_loop().time() + self._config.timeout_seconds
        if len(calls) == 1:
            return [await self._execute_single(calls[0], deadline)]
        return await self._execute_parallel(calls, deadline)

    async def _execute_parallel(
        self, calls: Sequence[ToolCall], deadline: float
    ) -> list[ExecutionResult]:
        semaphore = asyncio.Semaphore(self._config.max_parallel)

        async def _bounded(call: ToolCall) -> ExecutionResult:
            async with semaphore:
                return await self._execute_single(call, deadline)

        return list(await asyncio.gather(*(_bounded(call) for call in calls)))

    async def _execute_single(self, call: ToolCall, deadline: float) -> ExecutionResult:
        start = time.perf_counter()
        execution = ExecutionResult(tool_call=call)
        emit_tool_event(ToolEvent(tool_name=call.name, event_type="start", args=dict(call.args)))

        for middleware in self._middleware:
            try:
                await middleware.before_execution(call)
            except Exception as exc:
                LOGGER.warning("Tool %s rejected by middleware: %s", call.name, exc)
                execution.error = MiddlewareRejectedError(f"middleware error: {exc}")
                execution.duration = time.perf_counter() - start
                record_tool_call(call.name, execution.duration, success=False)
                emit_tool_event(
                    ToolEvent(
                        tool_name=call.name,
                        event_type="error",
                        error=str(exc),
                        duration=execution.duration,
                    )
                )
                return execution

        with start_span(f"tool.call.{call.name}"):
            set_span_attributes({"tool.name": call.name, "tool.args": str(call.args)})
            try:
                execution.result = await self._run_with_deadline(call, deadline)
            except ToolTimeoutError as exc:
                execution.error = exc
                execution.result = ToolResult.failure(
                    str(exc),
                    ErrorCode.TOOL_TIMEOUT,
                    content=f"Tool '{call.name}' failed: {exc}",
                )
            except Exception as exc:
                LOGGER.exception("Tool execution failed: tool=%s", call.name)
                execution.error = exc
                execution.result = ToolResult.failure(
                    str(exc),
                    ErrorCode.TOOL_EXECUTION_FAILED,
                    content=f"Tool '{call.name}' failed: {exc}",
                )
            set_span_status("OK" if execution.succeeded else "ERROR", _error_text(execution))

        execution.duration = time.perf_counter() - start
        record_tool_call(call.name, execution.duration, success=execution.succeeded)

        if execution.error is not None:
            emit_tool_event(
                ToolEvent(
                    tool_name=call.name,
                    event_type="error",
                    error=str(execution.error),
                    duration=execution.duration,
                )
            )
        else:
            emit_tool_event(
                ToolEvent(
                    tool_name=call.name,
                    event_type="complete",
                    result=execution.result.content if execution.result else "",
                    duration=execution.duration,
                )
            )

        for middleware in self._middleware:
            try:
                await middleware.after_execution(call, execution)
            except Exception:
                LOGGER.exception(
                    "Middleware %s failed after tool %s", type(middleware).__name__, call.name
                )

        return execution

    async def _run_with_deadline(self, call: ToolCall, deadline: float) -> ToolResult:
        timeout = self._config.timeout_seconds
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise ToolTimeoutError(f"tool '{call.name}' timed out after {timeout:g}s")
        try:
            return await asyncio.wait_for(
                self._registry.execute(call.name, call.args), timeout=remaining
            )
        except TimeoutError as exc:
            raise ToolTimeoutError(f"tool '{call.name}' timed out after {timeout:g}s") from exc

    async def handle_tool_call_flow(
        self,
        provider: Provider,
        request: GenerateRequest,
        response: GenerateResponse,
    ) -> ConversationResponse:
        """Execute requested tools and re-query the model until it stops asking.

        ``request``/``response`` are the model round-trip that started the
        turn. The loop stops after ``config.max_chains`` rounds of tool calls
        with an explanatory message instead of an error.

        Raises:
            ConversationError: If the provider fails.
        """
        max_chains = self._config.max_chains
        usage = response.usage
        tool_results: list[ExecutionResult] = []
        depth = 0

        with start_span("conversation.turn", attributes={"conversation.max_chains": max_chains}):
            if not response.tool_calls:
                reply = ConversationResponse(content=response.content, usage=usage, steps=1)
            else:
                while True:
                    if depth >= max_chains:
                        LOGGER.warning("Tool chain depth limit reached: %d/%d", depth, max_chains)
                        reply = ConversationResponse(
                            content=self.depth_limit_message(response.content, depth),
                            usage=usage,
                            steps=depth + 1,
                            tool_results=tool_results,
                            chain_depth=depth,
                            depth_limited=True,
                        )
                        break

                    history = [
                        *request.messages,
                        ChatMessage(
                            role="assistant",
                            content=response.content,
                            tool_calls=response.tool_calls,
                        ),
                    ]
                    results = await self.execute_tool_calls(response.tool_calls)
                    tool_results.extend(results)
                    history.extend(
                        ChatMessage(
                            role="tool",
                            content=self.format_tool_result_for_ai(result),
                            tool_call_id=result.tool_call.id or None,
                        )
                        for result in results
                    )

                    request = GenerateRequest(
                        messages=history,
                        model=request.model,
                        tools=request.tools,
                        max_tokens=request.max_tokens,
                    )
                    try:
                        response = await provider.generate_response(request)
                    except Exception as exc:
                        set_span_status("ERROR", str(exc))
                        raise ConversationError(
                            f"model response after tool execution failed: {exc}"
                        ) from exc
                    usage = combine_usage(usage, response.usage)

                    if not response.tool_calls:
                        reply = ConversationResponse(
                            content=response.content,
                            usage=usage,
                            steps=depth + 2,
                            tool_results=tool_results,
                            chain_depth=depth,
                        )
                        break
                    depth += 1

            set_span_attributes(
                {"conversation.steps": reply.steps, "conversation.chain_depth": reply.chain_depth}
            )
            log_event(
                ConversationEvent(
                    steps=reply.steps,
                    chain_depth=reply.chain_depth,
                    depth_limited=reply.depth_limited,
                    tool_calls=len(tool_results),
                    total_tokens=usage.total_tokens if usage else None,
                    trace=TraceContext(**current_trace_ids()),
                )
            )
        return reply

    def depth_limit_message(self, content: str, depth: int) -> str:
        """Text returned in place of a model answer when the chain limit is hit."""

        return (
            f"{content}\n\n**Tool chain limit reached ({self._config.max_chains} steps).** "
            f"I've completed {depth} tool operations but reached the maximum allowed chain "
            "length. If you need to continue, you can:\n"
            "- Ask me to pick up where I left off with a more focused approach\n"
            "- Break the task into smaller steps\n"
            "- Raise the AGENT_MAX_TOOL_CHAINS setting if this limit is too restrictive"
        )

    @staticmethod
    def format_tool_result_for_ai(result: ExecutionResult) -> str:
        """Render one execution result as a tool message for the model."""

        name = result.tool_call.name
        if result.error is not None:
            return f"Tool '{name}' failed: {result.error}"
        if result.result is None:
            return f"Tool '{name}' executed but returned no result"
        if not result.result.success:
            return f"Tool '{name}' failed: {result.result.error}"

        content = result.result.content
        if result.result.data:
            data = json.dumps(result.result.data, ensure_ascii=False, default=str)
            content += f"\n\nStructured data: {data}"
        return content


def _error_text(execution: ExecutionResult) -> str | None:
    if execution.error is not None:
        return str(execution.error)
    if execution.result is not None:
        return execution.result.error
    return None


__all__ = ["ExecutionEngine"]
