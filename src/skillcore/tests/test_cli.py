"""Tests for the skillcore command line."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from skillcore.cli import app
from skillcore.core.config import Settings, get_settings
from skillcore.tests.mocks import write_skill

runner = CliRunner()

MISSING_ENV = "SKILLCORE_CLI_TEST_TOKEN"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in list(os.environ):
        if key.startswith(Settings.ENV_PREFIX):
            monkeypatch.delenv(key)
    monkeypatch.delenv(MISSING_ENV, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def skills_dir(tmp_path: Path) -> Path:
    write_skill(
        tmp_path,
        "greeter",
        """
        ---
        name: greeter
        description: Say hello
        ---
        action: greet

        ```bash
        echo "greet from $AGENT_SKILL"
        ```
        """,
    )
    write_skill(
        tmp_path,
        "vault",
        f"""
        ---
        name: vault
        description: Secrets
        requires:
          env: [{MISSING_ENV}]
        ---
        """,
    )
    return tmp_path


def test_list_shows_available_skills(skills_dir: Path) -> None:
    result = runner.invoke(app, ["list", "--path", str(skills_dir)])

    assert result.exit_code == 0
    assert "greeter" in result.output
    assert "vault" not in result.output


def test_list_without_skills(tmp_path: Path) -> None:
    result = runner.invoke(app, ["list", "--path", str(tmp_path)])

    assert result.exit_code == 0
    assert "No skills available." in result.output


def test_status_reports_missing_requirements(skills_dir: Path) -> None:
    result = runner.invoke(app, ["status", "-p", str(skills_dir)])

    assert result.exit_code == 0
    assert "greeter" in result.output
    assert "vault" in result.output
    assert MISSING_ENV in result.output


def test_tools_lists_generated_tools(skills_dir: Path) -> None:
    result = runner.invoke(app, ["tools", "--path", str(skills_dir)])

    assert result.exit_code == 0
    assert "skill_greeter" in result.output


def test_run_prints_output(skills_dir: Path) -> None:
    result = runner.invoke(app, ["run", "greeter", "greet", "--path", str(skills_dir)])

    assert result.exit_code == 0
    assert "greet from greeter" in result.output


def test_run_unknown_skill_fails(skills_dir: Path) -> None:
    result = runner.invoke(app, ["run", "nope", "greet", "--path", str(skills_dir)])

    assert result.exit_code == 1
    assert "skill not found: nope" in result.output


def test_run_json_failure(skills_dir: Path) -> None:
    result = runner.invoke(
        app, ["run", "vault", "read", "--json", "--path", str(skills_dir)]
    )

    assert result.exit_code == 1
    assert '"success": false' in result.output
    assert '"error_code": "SKILL_NOT_FOUND"' in result.output


def test_run_rejects_non_object_args(skills_dir: Path) -> None:
    result = runner.invoke(
        app, ["run", "greeter", "greet", "--args", "[1, 2]", "--path", str(skills_dir)]
    )

    assert result.exit_code == 1
    assert "--args must be a JSON object" in result.output


def test_run_rejects_invalid_json(skills_dir: Path) -> None:
    result = runner.invoke(app, ["run", "greeter", "greet", "--args", "{oops"])

    assert result.exit_code == 1
    assert "invalid --args JSON" in result.output


def test_manifest_text_is_not_rich_markup(tmp_path: Path) -> None:
    write_skill(
        tmp_path,
        "odd",
        """
        ---
        name: odd
        description: closes [/b] tag
        ---
        """,
    )

    for command in ("list", "status", "tools"):
        result = runner.invoke(app, [command, "--path", str(tmp_path)])

        assert result.exit_code == 0, command
    listed = runner.invoke(app, ["list", "--path", str(tmp_path)])
    assert "closes [/b] tag" in listed.output
