"""Command line entry point for inspecting and running skills."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from skillcore.core.config import get_settings
from skillcore.observability.error_codes import ErrorCode, format_error_for_ai, get_error_info
from skillcore.observability.logging import setup_logging
from skillcore.skills.adapter import format_actions_list
from skillcore.skills.manager import SkillManager

app = typer.Typer(help="Discover, inspect and run agent skills.")
console = Console()

SEARCH_PATH_OPTION = typer.Option(
    None,
    "--path",
    "-p",
    help="Skill search path (repeatable). Defaults to AGENT_SKILLS_SEARCH_PATHS.",
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Show runtime logs.")


def _build_manager(paths: list[Path] | None, verbose: bool) -> SkillManager:
    settings = get_settings()
    setup_logging(
        settings.log_level if verbose else "WARNING",
        settings.app_name,
        log_format="text",
    )
    config = settings.skills_config()
    if paths:
        config = config.model_copy(update={"search_paths": [path.expanduser() for path in paths]})
    return SkillManager(config)


@app.command("list")
def list_skills(
    path: list[Path] = SEARCH_PATH_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List skills whose requirements are met."""

    manager = _build_manager(path, verbose)
    skills = asyncio.run(manager.get_available_skills())
    if not skills:
        console.print("[yellow]No skills available.[/yellow]")
        return

    table = Table(title="Available Skills")
    table.add_column("Skill")
    table.add_column("Description")
    table.add_column("Actions")
    table.add_column("Method")
    for skill in skills:
        table.add_row(
            escape(f"{skill.emoji} {skill.name}".strip()),
            escape(skill.description),
            escape(format_actions_list(skill.actions)),
            skill.execution_method.value,
        )
    console.print(table)


@app.command()
def status(
    path: list[Path] = SEARCH_PATH_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show every discovered skill and what it is missing."""

    manager = _build_manager(path, verbose)
    statuses = asyncio.run(manager.get_skill_status())
    if not statuses:
        console.print("[yellow]No skills found.[/yellow]")
        return

    table = Table(title="Skill Status")
    table.add_column("Skill")
    table.add_column("Available")
    table.add_column("Missing")
    for entry in statuses:
        missing = "; ".join(
            f"{kind}: {', '.join(items)}" for kind, items in entry.missing_requirements.items()
        )
        table.add_row(
            escape(entry.name),
            "[green]yes[/green]" if entry.available else "[red]no[/red]",
            escape(missing or (entry.error or "")),
        )
    console.print(table)


@app.command()
def tools(
    path: list[Path] = SEARCH_PATH_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show the tools generated from the available skills."""

    manager = _build_manager(path, verbose)
    generated = asyncio.run(manager.generate_tools())
    if not generated:
        console.print("[yellow]No skill tools generated.[/yellow]")
        return

    table = Table(title="Skill Tools")
    table.add_column("Tool")
    table.add_column("Description")
    for tool in generated:
        table.add_row(escape(tool.name), escape(tool.description))
    console.print(table)


@app.command()
def run(
    skill: str = typer.Argument(..., help="Skill name."),
    action: str = typer.Argument(..., help="Action to execute."),
    args: str = typer.Option("{}", "--args", "-a", help="Action arguments as a JSON object."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    path: list[Path] = SEARCH_PATH_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Execute a skill action and print its output."""

    try:
        parsed = json.loads(args)
    except json.JSONDecodeError as exc:
        console.print(f"[bold red]Error:[/bold red] invalid --args JSON: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    if not isinstance(parsed, dict):
        console.print("[bold red]Error:[/bold red] --args must be a JSON object")
        raise typer.Exit(code=1)

    manager = _build_manager(path, verbose)
    result = asyncio.run(manager.execute_skill(skill, action, parsed))

    if as_json:
        payload = result.model_dump(mode="json", include={"success", "content", "data"})
        if not result.success:
            payload["error"] = format_error_for_ai(
                result.error_code or ErrorCode.UNKNOWN, result.error
            )
        console.print_json(data=payload)
        if not result.success:
            raise typer.Exit(code=1)
        return

    if result.content:
        console.print(result.content, markup=False, highlight=False)
    if result.data:
        console.print_json(data=result.data)
    if not result.success:
        console.print(f"[bold red]Error:[/bold red] {escape(result.error or '')}", highlight=False)
        if result.error_code is not None:
            hint = get_error_info(result.error_code).recovery_hint
            console.print(f"[dim]{escape(hint)}[/dim]")
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
