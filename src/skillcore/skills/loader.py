"""SKILL.md parsing.

A manifest is markdown optionally prefixed by YAML frontmatter::

    ---
    name: weather
    description: Get forecasts
    emoji: "🌤"
    requires:
      anyBins: [curl, wget]
      env: [WEATHER_API_KEY]
    ---
    ## Current
    curl "https://example.invalid/current?city=$CITY"

The body is additionally mined for an action vocabulary. Extraction is
heuristic and applied in a fixed order, earlier rules winning on ordering:

1. explicit markers: ``action: name``, ``command: name``, ``do: name``,
   ``execute: name``
2. declarations: ``function name``, ``def name``, ``method name``
3. ``##`` headings containing a common verb stem, e.g. ``## Search mail``
   becomes ``search_mail``
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from skillcore.skills.errors import ManifestError
from skillcore.skills.models import Skill, SkillRequirements

LOGGER = logging.getLogger(__name__)

MANIFEST_FILENAME = "SKILL.md"
FRONTMATTER_DELIMITER = "---"

EXPLICIT_ACTION_PATTERN = re.compile(
    r"\b(?:action|command|do|execute)\s*:\s*`?([A-Za-z_][A-Za-z0-9_-]*)",
    re.IGNORECASE,
)
DECLARATION_PATTERN = re.compile(
    r"\b(?:function|def|method)\s+([A-Za-z_][A-Za-z0-9_-]*)",
    re.IGNORECASE,
)
ACTION_VERB_STEMS: tuple[str, ...] = (
    "search",
    "read",
    "send",
    "list",
    "get",
    "check",
    "update",
    "create",
    "delete",
    "execute",
    "run",
    "start",
    "stop",
    "status",
    "monitor",
    "forecast",
    "current",
    "control",
    "toggle",
    "cleanup",
    "organize",
)

_REQUIREMENT_KEYS: dict[str, tuple[str, ...]] = {
    "any_bins": ("anyBins", "any_bins"),
    "all_bins": ("allBins", "all_bins", "bins"),
    "files": ("files",),
    "env": ("env",),
}


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Separate YAML frontmatter from the markdown body.

    Returns ``(None, content)`` when the first line is not a delimiter.

    Raises:
        ManifestError: If the opening delimiter is never closed.
    """
    lines = content.split("\n")
    if not lines or lines[0].rstrip("\r") != FRONTMATTER_DELIMITER:
        return None, content

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r") == FRONTMATTER_DELIMITER:
            return "\n".join(lines[1:index]), "\n".join(lines[index + 1 :])

    raise ManifestError("frontmatter delimiter not properly closed")


def normalize_action(text: str) -> str:
    """Case-fold ``text`` and join whitespace runs with underscores."""

    return re.sub(r"\s+", "_", text.strip().casefold())


def is_action_like(text: str) -> bool:
    lowered = text.casefold()
    return any(stem in lowered for stem in ACTION_VERB_STEMS)


def extract_actions(content: str) -> tuple[str, ...]:
    """Infer the action vocabulary from a manifest body."""

    candidates: list[str] = []
    candidates.extend(match.group(1) for match in EXPLICIT_ACTION_PATTERN.finditer(content))
    candidates.extend(match.group(1) for match in DECLARATION_PATTERN.finditer(content))

    for line in content.splitlines():
        stripped = line.strip()
        if not stripped.startswith("##"):
            continue
        heading = stripped.lstrip("#").strip()
        if heading and is_action_like(heading):
            candidates.append(heading)

    return _dedupe(normalize_action(candidate) for candidate in candidates)


def _dedupe(items: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return tuple(result)


def _string_list(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    if isinstance(value, list | tuple):
        return tuple(item for item in value if isinstance(item, str) and item.strip())
    return ()


def parse_requirements(data: Mapping[str, Any]) -> SkillRequirements:
    """Build :class:`SkillRequirements` from a ``requires`` mapping."""

    values: dict[str, tuple[str, ...]] = {}
    for field_name, keys in _REQUIREMENT_KEYS.items():
        collected: list[str] = []
        for key in keys:
            collected.extend(_string_list(data.get(key)))
        values[field_name] = _dedupe(collected)
    return SkillRequirements(**values)


class SkillLoader:
    """Parse SKILL.md files into :class:`Skill` objects.

    Usage:
        loader = SkillLoader()
        skill = loader.load_file(Path("skills/weather/SKILL.md"))
    """

    def load_file(self, path: Path) -> Skill:
        """Load and parse a manifest file.

        Raises:
            ManifestError: If the file cannot be read or parsed.
        """
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ManifestError(f"error reading skill file {path}: {exc}") from exc
        return self.load_content(content)

    def load_content(self, content: str) -> Skill:
        """Parse manifest text.

        Raises:
            ManifestError: On malformed frontmatter or a missing name/description.
        """
        frontmatter, body = split_frontmatter(content)

        metadata: dict[str, Any] = {}
        if frontmatter is not None:
            try:
                parsed = yaml.safe_load(frontmatter)
            except yaml.YAMLError as exc:
                raise ManifestError(f"error parsing YAML frontmatter: {exc}") from exc
            if parsed is None:
                parsed = {}
            if not isinstance(parsed, dict):
                raise ManifestError("frontmatter must be a mapping")
            metadata = parsed

        name = metadata.get("name")
        description = metadata.get("description")
        if not isinstance(name, str) or not name.strip():
            raise ManifestError("skill name is required in frontmatter")
        if not isinstance(description, str) or not description.strip():
            raise ManifestError("skill description is required in frontmatter")

        emoji, requires = self._display_and_requirements(metadata)

        return Skill(
            name=name.strip(),
            description=description.strip(),
            content=body,
            emoji=emoji,
            requirements=parse_requirements(requires),
            actions=extract_actions(body),
        )

    @staticmethod
    def _display_and_requirements(
        metadata: Mapping[str, Any],
    ) -> tuple[str, Mapping[str, Any]]:
        """Read ``emoji`` and ``requires`` from the top level or a nested ``metadata`` block.

        Top-level keys win over the nested block.
        """
        nested = metadata.get("metadata")
        nested = nested if isinstance(nested, dict) else {}

        emoji = metadata.get("emoji", nested.get("emoji", ""))
        requires = metadata.get("requires", nested.get("requires", {}))
        if not isinstance(emoji, str):
            emoji = ""
        if not isinstance(requires, dict):
            LOGGER.debug("Ignoring non-mapping requires block: %r", requires)
            requires = {}
        return emoji, requires


__all__ = [
    "ACTION_VERB_STEMS",
    "FRONTMATTER_DELIMITER",
    "MANIFEST_FILENAME",
    "SkillLoader",
    "extract_actions",
    "is_action_like",
    "normalize_action",
    "parse_requirements",
    "split_frontmatter",
]
