"""Tests for SkillDiscovery."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from skillcore.skills.discovery import SkillDiscovery, discover_references, discover_scripts
from skillcore.skills.models import ExecutionMethod
from skillcore.skills.validator import SkillValidator
from skillcore.tests.mocks import write_skill


def no_binaries(binary: str) -> str | None:
    return None


@pytest.fixture
def skills_root(tmp_path: Path) -> Path:
    root = tmp_path / "skills"
    root.mkdir()
    return root


class TestSkillDiscovery:
    """Tests for SkillDiscovery."""

    def test_directory_without_manifest_is_skipped(self, skills_root: Path) -> None:
        (skills_root / "notes").mkdir()
        (skills_root / "notes" / "README.md").write_text("not a skill")
        (skills_root / "loose-file.md").write_text("also not a skill")
        write_skill(skills_root, "weather", "---\nname: weather\ndescription: Forecasts\n---\n")

        skills = SkillDiscovery([skills_root]).discover()

        assert [skill.name for skill in skills] == ["weather"]
        assert skills[0].location == skills_root / "weather"

    def test_missing_search_path_is_not_fatal(self, skills_root: Path, tmp_path: Path) -> None:
        write_skill(skills_root, "weather", "---\nname: weather\ndescription: Forecasts\n---\n")

        skills = SkillDiscovery([tmp_path / "does-not-exist", skills_root]).discover()

        assert [skill.name for skill in skills] == ["weather"]

    def test_broken_manifest_excludes_only_that_skill(
        self, skills_root: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        write_skill(skills_root, "broken", "---\nname: broken\ndescription: never closed\n")
        write_skill(skills_root, "nameless", "---\ndescription: no name\n---\n")
        write_skill(skills_root, "good", "---\nname: good\ndescription: Works\n---\n")

        with caplog.at_level(logging.WARNING):
            skills = SkillDiscovery([skills_root]).discover()

        assert [skill.name for skill in skills] == ["good"]
        assert "frontmatter delimiter not properly closed" in caplog.text

    def test_unmet_requirements_are_excluded(self, skills_root: Path) -> None:
        write_skill(
            skills_root,
            "media",
            """
            ---
            name: media
            description: Convert media
            requires:
              allBins: ["ffmpeg"]
            ---
            """,
        )
        discovery = SkillDiscovery([skills_root], validator=SkillValidator(which=no_binaries))

        assert discovery.discover() == []
        assert [skill.name for skill in discovery.discover_all()] == ["media"]

    def test_first_search_path_wins_on_duplicate_names(self, tmp_path: Path) -> None:
        first = tmp_path / "first"
        second = tmp_path / "second"
        write_skill(first, "weather", "---\nname: weather\ndescription: First\n---\n")
        write_skill(second, "weather", "---\nname: weather\ndescription: Second\n---\n")

        skills = SkillDiscovery([first, second]).discover()

        assert [skill.description for skill in skills] == ["First"]

    def test_execution_method_follows_scripts(self, skills_root: Path) -> None:
        write_skill(skills_root, "plain", "---\nname: plain\ndescription: No scripts\n---\n")
        write_skill(
            skills_root,
            "scripted",
            "---\nname: scripted\ndescription: Has scripts\n---\n",
            {"scripts/search.sh": "echo hi\n"},
        )

        skills = {skill.name: skill for skill in SkillDiscovery([skills_root]).discover()}

        assert skills["plain"].execution_method is ExecutionMethod.SUBPROCESS
        assert skills["scripted"].execution_method is ExecutionMethod.SCRIPT


class TestDiscoverScripts:
    def test_recursive_executable_scripts(self, tmp_path: Path) -> None:
        skill_dir = write_skill(
            tmp_path,
            "tools",
            "---\nname: tools\ndescription: Tools\n---\n",
            {
                "run.sh": "echo run\n",
                "lib/search.py": "print('x')\n",
                "bin/notify.js": "console.log('x')\n",
                "notes.txt": "not a script\n",
            },
        )

        scripts = discover_scripts(skill_dir)

        assert [(s.name, s.path, s.language) for s in scripts] == [
            ("notify", "bin/notify.js", "javascript"),
            ("search", "lib/search.py", "python"),
            ("run", "run.sh", "bash"),
        ]

    def test_non_executable_files_are_ignored(self, tmp_path: Path) -> None:
        skill_dir = write_skill(
            tmp_path,
            "tools",
            "---\nname: tools\ndescription: Tools\n---\n",
            {"run.sh": "echo run\n"},
            executable=False,
        )

        assert discover_scripts(skill_dir) == ()


class TestDiscoverReferences:
    def test_conventional_reference_files(self, tmp_path: Path) -> None:
        skill_dir = write_skill(tmp_path, "ref", "---\nname: ref\ndescription: Refs\n---\n")
        for name in ("README.md", "EXAMPLES.md", "package.json", "data.json", "settings.yaml"):
            (skill_dir / name).write_text("{}")

        references = discover_references(skill_dir)

        assert [(r.name, r.type) for r in references] == [
            ("README.md", "documentation"),
            ("EXAMPLES.md", "examples"),
            ("package.json", "dependencies"),
            ("data.json", "data"),
            ("settings.yaml", "configuration"),
        ]
        assert all(r.name != "SKILL.md" for r in references)
