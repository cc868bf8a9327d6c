"""Run skill actions as subprocesses.

Skills with scripts run the matching script. Skills without scripts get a
bash command synthesized from their SKILL.md body. Either way the action
arguments are passed as JSON on stdin and the combined output is returned.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import shlex
import signal
import time
from collections.abc import Mapping, Sequence
from typing import Any

from skillcore.core.config import DEFAULT_SECRETS_FILE, ExecutionConfig
from skillcore.models.events import SkillExecutionEvent, TraceContext
from skillcore.observability.error_codes import ErrorCode
from skillcore.observability.logging import log_event
from skillcore.observability.metrics import record_skill_execution
from skillcore.observability.tracing import current_trace_ids, set_span_status, start_span
from skillcore.skills.models import ExecutionMethod, Skill, SkillScript
from skillcore.tools.base import ToolResult

LOGGER = logging.getLogger(__name__)

SKILL_NAME_ENV = "AGENT_SKILL"
SKILL_DIR_ENV = "AGENT_SKILL_DIR"

INTERPRETERS: dict[str, str] = {
    "bash": "bash",
    "python": "python3",
    "javascript": "node",
    "ruby": "ruby",
    "perl": "perl",
    "php": "php",
}

COMMAND_PREFIXES: tuple[str, ...] = ("curl ", "gog ", "ha ", "gh ", "wget ")

ACTION_SYNONYMS: dict[str, tuple[str, ...]] = {
    "search": ("search", "find", "query", "list"),
    "read": ("read", "get", "fetch", "show"),
    "send": ("send", "create", "post"),
    "list": ("list", "ls", "show", "get"),
    "status": ("status", "state", "check", "info"),
}

FENCE = "```"

READ_CHUNK_BYTES = 65536
DRAIN_SECONDS = 1.0


def find_script(scripts: Sequence[SkillScript], action: str) -> SkillScript | None:
    """Pick the script for ``action``.

    Exact name match first, then a case-insensitive substring match, then
    the only script if there is exactly one.
    """
    for script in scripts:
        if script.name == action:
            return script

    needle = action.lower()
    for script in scripts:
        if needle in script.name.lower():
            return script

    if len(scripts) == 1:
        return scripts[0]
    return None


def is_relevant_command(command: str, action: str) -> bool:
    """Return True when ``command`` mentions ``action`` or one of its synonyms."""

    action_lower = action.lower()
    command_lower = command.lower()
    words = (action_lower, *ACTION_SYNONYMS.get(action_lower, ()))
    return any(word and word in command_lower for word in words)


def extract_multiline_command(lines: Sequence[str], start: int) -> str:
    """Join the command at ``lines[start]`` with its continuation lines.

    A continuation is a non-empty line that is indented, starts with ``-``,
    or follows a line ending in a backslash.
    """
    parts: list[str] = []
    current = lines[start].strip()
    for raw in lines[start + 1 :]:
        stripped = raw.strip()
        if not stripped:
            break
        continued = current.endswith("\\")
        if not (continued or raw[:1] in (" ", "\t") or stripped.startswith("-")):
            break
        parts.append(current.removesuffix("\\").rstrip() if continued else current)
        current = stripped
    parts.append(current.removesuffix("\\").rstrip())
    return " ".join(parts)


def extract_action_command(content: str, action: str) -> str:
    """Locate a shell command for ``action`` in a manifest body.

    Fenced code blocks are checked first, in document order. Otherwise the
    first unfenced line starting with a known command prefix that mentions
    the action is used. Returns an empty string when nothing matches.
    """
    lines = content.split("\n")
    in_block = False
    block: list[str] = []
    candidates: list[int] = []

    for index, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith(FENCE):
            if in_block:
                command = "\n".join(block).strip()
                if command and is_relevant_command(command, action):
                    return command
                block = []
            in_block = not in_block
            continue

        if in_block:
            block.append(line)
        elif stripped.startswith(COMMAND_PREFIXES):
            candidates.append(index)

    for index in candidates:
        if is_relevant_command(lines[index], action):
            return extract_multiline_command(lines, index)
    return ""


def build_shell_command(
    skill: Skill, action: str, secrets_file: str = DEFAULT_SECRETS_FILE
) -> tuple[str, bool]:
    """Synthesize a bash script for ``action``.

    Returns:
        ``(command, fallback_used)``. When no relevant command is found the
        script ends in an inert ``echo`` and ``fallback_used`` is True.
    """
    content = skill.content
    lines: list[str] = []

    if f"source {secrets_file}" in content:
        lines.append(f"source {secrets_file}")

    for line in content.split("\n"):
        stripped = line.strip()
        if stripped.startswith("export "):
            lines.append(stripped)

    command = extract_action_command(content, action)
    fallback_used = not command
    if fallback_used:
        command = f"echo {shlex.quote(f'Executed action: {action}')}"
    lines.append(command)
    return "\n".join(lines), fallback_used


def parse_structured_output(output: str) -> dict[str, Any] | None:
    """Return ``output`` as a JSON object, or None when it is not one."""

    text = output.strip()
    if not text:
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


class SkillExecutor:
    """Execute skill actions with a timeout.

    Args:
        config: Timeout and extra environment for every invocation.
        secrets_file: Secrets file sourced by synthesized commands when the
            manifest body references it.
    """

    def __init__(
        self,
        config: ExecutionConfig | None = None,
        *,
        secrets_file: str = DEFAULT_SECRETS_FILE,
    ) -> None:
        self.config = config or ExecutionConfig()
        self.secrets_file = secrets_file

    async def execute(
        self,
        skill: Skill,
        action: str,
        args: Mapping[str, Any] | None = None,
    ) -> ToolResult:
        """Run ``action`` of ``skill`` and return its result.

        Failures are reported on the result, never raised.
        """
        start = time.perf_counter()
        method = skill.execution_method
        attributes = {
            "skill.name": skill.name,
            "skill.action": action,
            "skill.method": method.value,
        }
        with start_span(f"skill.{skill.name}", attributes=attributes):
            result = await self._dispatch(skill, action, dict(args or {}))
            set_span_status("OK" if result.success else "ERROR", result.error)

        duration_ms = (time.perf_counter() - start) * 1000
        record_skill_execution(skill.name, method.value, result.success)
        log_event(
            SkillExecutionEvent(
                skill=skill.name,
                action=action,
                method=method.value,
                success=result.success,
                duration_ms=duration_ms,
                error_code=result.error_code.value if result.error_code else None,
                trace=TraceContext(**current_trace_ids()),
            )
        )
        return result

    async def _dispatch(self, skill: Skill, action: str, args: dict[str, Any]) -> ToolResult:
        if skill.execution_method is ExecutionMethod.SCRIPT:
            script = find_script(skill.scripts, action)
            if script is None:
                return ToolResult.failure(
                    f"no script found for action: {action}", ErrorCode.SKILL_NO_SCRIPT
                )
            return await self._run(self._script_argv(skill, script), skill, args)

        command, fallback_used = build_shell_command(skill, action, self.secrets_file)
        if fallback_used:
            LOGGER.warning(
                "No command found for action %s of skill %s; using echo fallback",
                action,
                skill.name,
            )
        result = await self._run(["bash", "-c", command], skill, args)
        if fallback_used and result.success:
            result = result.model_copy(update={"fallback_used": True})
        return result

    @staticmethod
    def _script_argv(skill: Skill, script: SkillScript) -> list[str]:
        script_path = str(skill.location / script.path) if skill.location else script.path
        interpreter = INTERPRETERS.get(script.language)
        return [interpreter, script_path] if interpreter else [script_path]

    def build_environment(self, skill: Skill) -> dict[str, str]:
        """Process environment plus configured variables and the skill identity."""

        env = dict(os.environ)
        env.update(self.config.environment)
        env[SKILL_NAME_ENV] = skill.name
        env[SKILL_DIR_ENV] = str(skill.location) if skill.location else ""
        return env

    async def _run(self, argv: list[str], skill: Skill, args: dict[str, Any]) -> ToolResult:
        payload = json.dumps(args).encode() if args else None
        LOGGER.info("Executing skill %s: %s", skill.name, shlex.join(argv))

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(skill.location) if skill.location else None,
                env=self.build_environment(skill),
                stdin=asyncio.subprocess.PIPE if payload else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as exc:
            LOGGER.error("Failed to start skill %s: %s", skill.name, exc)
            return ToolResult.failure(
                f"failed to start skill process: {exc}", ErrorCode.SKILL_EXECUTION_FAILED
            )

        timeout = self.config.timeout_seconds
        output = bytearray()
        try:
            await asyncio.wait_for(_communicate(process, payload, output), timeout=timeout)
        except TimeoutError:
            await _terminate(process)
            # Keep whatever the skill printed before the deadline.
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(_read_into(process, output), timeout=DRAIN_SECONDS)
            LOGGER.warning("Skill %s timed out after %ss", skill.name, timeout)
            return ToolResult.failure(
                f"skill execution timed out after {timeout:g}s",
                ErrorCode.SKILL_TIMEOUT,
                content=output.decode("utf-8", errors="replace"),
            )
        except asyncio.CancelledError:
            await _terminate(process)
            raise

        text = output.decode("utf-8", errors="replace")
        if process.returncode != 0:
            return ToolResult.failure(
                f"skill execution failed with exit code {process.returncode}",
                ErrorCode.SKILL_EXECUTION_FAILED,
                content=text,
            )

        return ToolResult(success=True, content=text, data=parse_structured_output(text))


async def _communicate(
    process: asyncio.subprocess.Process, payload: bytes | None, output: bytearray
) -> None:
    await asyncio.gather(_feed_stdin(process, payload), _read_into(process, output))
    await process.wait()


async def _feed_stdin(process: asyncio.subprocess.Process, payload: bytes | None) -> None:
    if payload is None or process.stdin is None:
        return
    try:
        process.stdin.write(payload)
        await process.stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        # The skill exited without reading its arguments.
        LOGGER.debug("Skill process closed stdin before reading arguments")
    finally:
        process.stdin.close()


async def _read_into(process: asyncio.subprocess.Process, output: bytearray) -> None:
    if process.stdout is None:
        return
    while chunk := await process.stdout.read(READ_CHUNK_BYTES):
        output.extend(chunk)


async def _terminate(process: asyncio.subprocess.Process) -> None:
    # Kill the whole session so grandchildren do not keep the output pipe open.
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            if hasattr(os, "killpg"):
                os.killpg(process.pid, signal.SIGKILL)
            else:
                process.kill()
    await process.wait()


__all__ = [
    "ACTION_SYNONYMS",
    "COMMAND_PREFIXES",
    "SKILL_DIR_ENV",
    "SKILL_NAME_ENV",
    "SkillExecutor",
    "build_shell_command",
    "extract_action_command",
    "extract_multiline_command",
    "find_script",
    "is_relevant_command",
    "parse_structured_output",
]
