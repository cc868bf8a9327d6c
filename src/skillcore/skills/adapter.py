"""Expose discovered skills as model-callable tools."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any

from skillcore.observability.error_codes import ErrorCode
from skillcore.skills.models import Skill
from skillcore.tools.base import Tool, ToolResult

if TYPE_CHECKING:
    from skillcore.skills.manager import SkillManager
    from skillcore.tools.registry import ToolRegistry

LOGGER = logging.getLogger(__name__)

SkillRunner = Callable[[str, str, dict[str, Any]], Awaitable[ToolResult]]

DEFAULT_EMOJI = "🔧"
FALLBACK_ACTIONS: tuple[str, ...] = ("status", "help")

# Actions that also get a dedicated tool; everything else is only reachable
# through the general skill_<name> tool.
KEY_ACTIONS: frozenset[str] = frozenset(
    {
        "search",
        "status",
        "current",
        "forecast",
        "cleanup",
        "briefing",
        "generate",
        "daily_report",
        "monitor",
        "list",
    }
)


def format_actions_list(actions: Sequence[str], limit: int = 3) -> str:
    """Render ``actions`` for a description, e.g. ``a, b, c and 2 more``."""

    if not actions:
        return "none"
    shown = ", ".join(actions[:limit])
    if len(actions) <= limit:
        return shown
    return f"{shown} and {len(actions) - limit} more"


def extract_available_actions(skill: Skill) -> list[str]:
    """Return the skill's action vocabulary, or the fallback set if it has none."""

    return list(skill.actions) if skill.actions else list(FALLBACK_ACTIONS)


class SkillTool(Tool):
    """General tool for one skill: ``skill_<name>(action, args)``."""

    category = "skill"

    def __init__(self, skill: Skill, actions: Sequence[str], runner: SkillRunner) -> None:
        self.skill = skill
        self.actions = list(actions)
        self._runner = runner
        self.name = f"skill_{skill.name}"
        self.description = (
            f"{skill.emoji or DEFAULT_EMOJI} {skill.description} "
            f"(Available actions: {format_actions_list(self.actions)})"
        )
        self.parameters = {
            "type": "object",
            "properties": {
                "action": {
                    "type": "string",
                    "description": (
                        f"Action to perform. Available: {format_actions_list(self.actions)}"
                    ),
                    "enum": list(self.actions),
                },
                "args": {
                    "type": "object",
                    "description": "Arguments for the skill action",
                },
            },
            "required": ["action"],
        }

    async def run(self, **kwargs: Any) -> ToolResult:
        action = kwargs.get("action")
        if not isinstance(action, str) or not action:
            return ToolResult.failure("action parameter is required", ErrorCode.TOOL_INVALID_ARGS)

        args = kwargs.get("args")
        skill_args = dict(args) if isinstance(args, dict) else {}
        return await self._runner(self.skill.name, action, skill_args)


class SkillActionTool(Tool):
    """Dedicated tool for a single key action: ``<name>_<action>``."""

    category = "skill"

    def __init__(
        self,
        skill: Skill,
        action: str,
        runner: SkillRunner,
        actions: Sequence[str] | None = None,
    ) -> None:
        self.skill = skill
        self.action = action
        self._runner = runner
        self.name = f"{skill.name}_{action}"
        available = list(actions) if actions is not None else extract_available_actions(skill)
        self.description = (
            f"{skill.emoji or DEFAULT_EMOJI} {skill.name} - {action} action: "
            f"{skill.description} (Available actions: {format_actions_list(available)})"
        )

        properties: dict[str, Any] = {
            "args": {
                "type": "object",
                "description": f"Arguments for {action} action",
            },
        }
        if action == "search":
            properties["query"] = {"type": "string", "description": "Search query"}
        elif action in ("forecast", "current"):
            properties["location"] = {
                "type": "string",
                "description": "Location for weather data",
            }
        self.parameters = {"type": "object", "properties": properties}

    async def run(self, **kwargs: Any) -> ToolResult:
        args = kwargs.get("args")
        skill_args: dict[str, Any] = dict(args) if isinstance(args, dict) else {}
        # Top-level fields such as query or location travel inside the args bag.
        skill_args.update({key: value for key, value in kwargs.items() if key != "args"})
        return await self._runner(self.skill.name, self.action, skill_args)


class SkillToolGenerator:
    """Map skills to the tools advertised to the model.

    Args:
        runner: Coroutine ``(skill_name, action, args) -> ToolResult`` the
            generated tools delegate to, normally
            :meth:`SkillManager.execute_skill`.
    """

    def __init__(self, runner: SkillRunner) -> None:
        self._runner = runner

    def generate_tools(self, skills: Iterable[Skill]) -> list[Tool]:
        tools: list[Tool] = []
        for skill in skills:
            actions = extract_available_actions(skill)
            tools.append(SkillTool(skill, actions, self._runner))
            tools.extend(
                SkillActionTool(skill, action, self._runner, actions)
                for action in actions
                if action in KEY_ACTIONS
            )
        LOGGER.debug("Generated %d tools from skills", len(tools))
        return tools

    def build_skills_context(self, skills: Sequence[Skill]) -> str:
        """Render the "Available Skills" section of a system prompt."""

        if not skills:
            return ""

        sections = [
            "## Available Skills\n",
            "The following specialized skills are available:\n",
        ]
        for skill in skills:
            actions = extract_available_actions(skill)
            location = skill.location.name if skill.location else ""
            sections.append(
                f"### {skill.emoji or DEFAULT_EMOJI} {skill.name}\n"
                f"{skill.description}\n"
                f"**Tool:** `skill_{skill.name}` **Actions:** {format_actions_list(actions)}\n"
                f"**Location:** {location}\n"
            )
        return "\n".join(sections)


async def register_skill_tools(registry: ToolRegistry, manager: SkillManager) -> list[Tool]:
    """Register every tool generated from ``manager``'s skills into ``registry``."""

    if not manager.is_enabled():
        LOGGER.info("Skills disabled, no skill tools registered")
        return []

    tools = await manager.generate_tools()
    for tool in tools:
        registry.register(tool)
    LOGGER.info("Registered %d skill tools", len(tools))
    return tools


__all__ = [
    "FALLBACK_ACTIONS",
    "KEY_ACTIONS",
    "SkillActionTool",
    "SkillTool",
    "SkillToolGenerator",
    "extract_available_actions",
    "format_actions_list",
    "register_skill_tools",
]
