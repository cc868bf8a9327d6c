"""Skill discovery, validation, execution and tool generation."""

from skillcore.skills.adapter import (
    KEY_ACTIONS,
    SkillActionTool,
    SkillTool,
    SkillToolGenerator,
    format_actions_list,
    register_skill_tools,
)
from skillcore.skills.discovery import SkillDiscovery
from skillcore.skills.errors import (
    ManifestError,
    RequirementsError,
    SkillError,
    SkillNotFoundError,
)
from skillcore.skills.executor import SkillExecutor
from skillcore.skills.loader import SkillLoader
from skillcore.skills.manager import SkillManager
from skillcore.skills.models import (
    ExecutionMethod,
    Skill,
    SkillReference,
    SkillRequirements,
    SkillScript,
    SkillStatus,
)
from skillcore.skills.validator import SkillValidator

__all__ = [
    "KEY_ACTIONS",
    "ExecutionMethod",
    "ManifestError",
    "RequirementsError",
    "Skill",
    "SkillActionTool",
    "SkillDiscovery",
    "SkillError",
    "SkillExecutor",
    "SkillLoader",
    "SkillManager",
    "SkillNotFoundError",
    "SkillReference",
    "SkillRequirements",
    "SkillScript",
    "SkillStatus",
    "SkillTool",
    "SkillToolGenerator",
    "SkillValidator",
    "format_actions_list",
    "register_skill_tools",
]
