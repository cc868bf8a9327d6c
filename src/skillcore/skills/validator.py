"""Prerequisite and structure checks for discovered skills."""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable, Mapping
from pathlib import Path

from skillcore.skills.errors import RequirementsError
from skillcore.skills.models import Skill, SkillRequirements


class SkillValidator:
    """Check that a skill's declared prerequisites can be satisfied.

    ``validate_requirements`` is the gating check used by discovery: it stops
    at the first failing category. ``get_missing_requirements`` is the
    diagnostic variant and reports every category at once.

    Args:
        which: Executable lookup, defaults to :func:`shutil.which`.
        environ: Environment mapping, defaults to ``os.environ``.
        home: Base directory for relative file requirements.
    """

    def __init__(
        self,
        *,
        which: Callable[[str], str | None] | None = None,
        environ: Mapping[str, str] | None = None,
        home: Path | None = None,
    ) -> None:
        self._which = which or shutil.which
        self._environ = environ
        self._home = home

    @property
    def environ(self) -> Mapping[str, str]:
        return self._environ if self._environ is not None else os.environ

    def validate_requirements(self, requirements: SkillRequirements) -> None:
        """Raise :class:`RequirementsError` for the first unmet category."""

        if requirements.any_bins and not self._any_bin_found(requirements.any_bins):
            raise RequirementsError(
                f"none of the required binaries found: {', '.join(requirements.any_bins)}",
                {"anyBins": list(requirements.any_bins)},
            )

        missing_bins = self._missing_bins(requirements.all_bins)
        if missing_bins:
            raise RequirementsError(
                f"missing required binaries: {', '.join(missing_bins)}",
                {"allBins": missing_bins},
            )

        missing_files = self._missing_files(requirements.files)
        if missing_files:
            raise RequirementsError(
                f"missing required files: {', '.join(missing_files)}",
                {"files": missing_files},
            )

        missing_env = self._missing_env(requirements.env)
        if missing_env:
            raise RequirementsError(
                f"missing required environment variables: {', '.join(missing_env)}",
                {"env": missing_env},
            )

    def get_missing_requirements(self, requirements: SkillRequirements) -> dict[str, list[str]]:
        """Collect the shortfall of every requirement category.

        Returns:
            Mapping keyed by ``anyBins``, ``allBins``, ``files`` and ``env``;
            categories that are satisfied are omitted.
        """
        missing: dict[str, list[str]] = {}

        if requirements.any_bins and not self._any_bin_found(requirements.any_bins):
            missing["anyBins"] = list(requirements.any_bins)

        missing_bins = self._missing_bins(requirements.all_bins)
        if missing_bins:
            missing["allBins"] = missing_bins

        missing_files = self._missing_files(requirements.files)
        if missing_files:
            missing["files"] = missing_files

        missing_env = self._missing_env(requirements.env)
        if missing_env:
            missing["env"] = missing_env

        return missing

    def validate_skill_structure(self, skill: Skill) -> None:
        """Check the parsed skill and its directory layout.

        Raises:
            RequirementsError: If mandatory fields are empty, the directory
                is not accessible, or a discovered script is gone or no
                longer executable.
        """
        if not skill.name:
            raise RequirementsError("skill name is required")
        if not skill.description:
            raise RequirementsError("skill description is required")
        if skill.location is None:
            raise RequirementsError("skill location is required")
        if not skill.location.is_dir():
            raise RequirementsError(f"skill location not accessible: {skill.location}")

        for script in skill.scripts:
            script_path = skill.location / script.path
            if not script_path.exists():
                raise RequirementsError(f"script not found: {script.path}")
            if not os.access(script_path, os.X_OK):
                raise RequirementsError(f"script not executable: {script.path}")

    def _any_bin_found(self, bins: tuple[str, ...]) -> bool:
        return any(self._which(binary) for binary in bins)

    def _missing_bins(self, bins: tuple[str, ...]) -> list[str]:
        return [binary for binary in bins if not self._which(binary)]

    def _missing_files(self, files: tuple[str, ...]) -> list[str]:
        return [file for file in files if not self.resolve_file(file).exists()]

    def _missing_env(self, names: tuple[str, ...]) -> list[str]:
        return [name for name in names if not self.environ.get(name)]

    def resolve_file(self, file: str) -> Path:
        """Expand ``$VARS`` and ``~``; relative paths are taken from the home directory."""

        path = Path(os.path.expanduser(os.path.expandvars(file)))
        if not path.is_absolute():
            path = (self._home or Path.home()) / path
        return path


__all__ = ["SkillValidator"]
