"""Filesystem discovery of skill directories."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import replace
from pathlib import Path

from skillcore.skills.errors import ManifestError, RequirementsError
from skillcore.skills.loader import MANIFEST_FILENAME, SkillLoader
from skillcore.skills.models import (
    ExecutionMethod,
    Skill,
    SkillReference,
    SkillScript,
)
from skillcore.skills.validator import SkillValidator

LOGGER = logging.getLogger(__name__)

SCRIPT_LANGUAGES: dict[str, str] = {
    ".sh": "bash",
    ".py": "python",
    ".js": "javascript",
    ".rb": "ruby",
    ".pl": "perl",
    ".php": "php",
}

# Glob pattern -> reference type. Specific names come before wildcards so
# package.json is reported as dependencies rather than data.
REFERENCE_PATTERNS: tuple[tuple[str, str], ...] = (
    ("README.md", "documentation"),
    ("EXAMPLES.md", "examples"),
    ("CONFIG.md", "configuration"),
    ("package.json", "dependencies"),
    ("*.json", "data"),
    ("*.yaml", "configuration"),
    ("*.yml", "configuration"),
)


class SkillDiscovery:
    """Scan search paths for ``<dir>/SKILL.md`` skill folders.

    Only immediate subdirectories of each search path are considered. A
    missing search path, a directory without a manifest and a manifest that
    fails to parse are all skipped without affecting the other skills.

    Usage:
        discovery = SkillDiscovery([Path("skills")])
        skills = discovery.discover()
    """

    def __init__(
        self,
        search_paths: Iterable[Path],
        *,
        loader: SkillLoader | None = None,
        validator: SkillValidator | None = None,
    ) -> None:
        self.search_paths = [Path(path) for path in search_paths]
        self._loader = loader or SkillLoader()
        self._validator = validator or SkillValidator()

    def discover(self) -> list[Skill]:
        """Return every skill that parses and passes validation."""

        available: list[Skill] = []
        for skill in self.discover_all():
            try:
                self._validator.validate_skill_structure(skill)
                self._validator.validate_requirements(skill.requirements)
            except RequirementsError as exc:
                LOGGER.info("Skill %s unavailable: %s", skill.name, exc)
                continue
            available.append(skill)

        LOGGER.info("Discovered %d available skills", len(available))
        return available

    def discover_all(self) -> list[Skill]:
        """Return every parseable skill, regardless of its requirements.

        When two search paths provide a skill with the same name, the one
        found first wins.
        """
        skills: dict[str, Skill] = {}
        for skill_dir in self._candidate_dirs():
            try:
                skill = self.load_skill(skill_dir)
            except ManifestError as exc:
                LOGGER.warning("Failed to load skill from %s: %s", skill_dir, exc)
                continue

            if skill.name in skills:
                LOGGER.warning(
                    "Skill %s in %s shadowed by %s",
                    skill.name,
                    skill_dir,
                    skills[skill.name].location,
                )
                continue
            skills[skill.name] = skill
        return list(skills.values())

    def load_skill(self, skill_dir: Path) -> Skill:
        """Parse one skill directory and attach its scripts and references.

        Raises:
            ManifestError: If the manifest cannot be read or parsed.
        """
        skill = self._loader.load_file(skill_dir / MANIFEST_FILENAME)
        scripts = discover_scripts(skill_dir)
        return replace(
            skill,
            location=skill_dir,
            scripts=scripts,
            references=discover_references(skill_dir),
            execution_method=ExecutionMethod.SCRIPT if scripts else ExecutionMethod.SUBPROCESS,
        )

    def _candidate_dirs(self) -> Iterator[Path]:
        for search_path in self.search_paths:
            if not search_path.is_dir():
                LOGGER.debug("Skill search path %s does not exist", search_path)
                continue
            try:
                entries = sorted(search_path.iterdir())
            except OSError as exc:
                LOGGER.warning("Cannot read skill search path %s: %s", search_path, exc)
                continue
            for entry in entries:
                if entry.is_dir() and (entry / MANIFEST_FILENAME).is_file():
                    yield entry


def discover_scripts(skill_dir: Path) -> tuple[SkillScript, ...]:
    """Find executable files with a known interpreter anywhere under ``skill_dir``."""

    scripts: list[SkillScript] = []
    for path in sorted(skill_dir.rglob("*")):
        language = SCRIPT_LANGUAGES.get(path.suffix.lower())
        if language is None or not path.is_file():
            continue
        if not os.access(path, os.X_OK):
            LOGGER.debug("Ignoring non-executable script %s", path)
            continue
        scripts.append(
            SkillScript(
                name=path.stem,
                path=path.relative_to(skill_dir).as_posix(),
                language=language,
            )
        )
    return tuple(scripts)


def discover_references(skill_dir: Path) -> tuple[SkillReference, ...]:
    """Collect conventional reference files at the top of ``skill_dir``."""

    references: list[SkillReference] = []
    seen: set[Path] = set()
    for pattern, ref_type in REFERENCE_PATTERNS:
        for path in sorted(skill_dir.glob(pattern)):
            if path.name == MANIFEST_FILENAME or path in seen or not path.is_file():
                continue
            seen.add(path)
            references.append(
                SkillReference(
                    name=path.name,
                    path=path.relative_to(skill_dir).as_posix(),
                    type=ref_type,
                )
            )
    return tuple(references)


__all__ = [
    "REFERENCE_PATTERNS",
    "SCRIPT_LANGUAGES",
    "SkillDiscovery",
    "discover_references",
    "discover_scripts",
]
