"""guideline commands — a project's custom review rules."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from codezen_cli.commands.project import require_project

console = Console()


@click.group("guideline")
def guideline_cmd():
    """Manage the custom guidelines injected into every review of a project."""


@guideline_cmd.command("add")
@click.argument("project_id", type=int)
@click.argument("rule_text")
@click.pass_context
def add_cmd(ctx, project_id: int, rule_text: str):
    """Append a guideline to the project."""
    if not rule_text.strip():
        raise click.UsageError("Guideline text must not be empty.")
    project = require_project(ctx, project_id)
    guideline = ctx.obj["store"].add_guideline(project.id, rule_text)
    console.print(f"[green]Added guideline [{guideline.id}] to project #{project.id}.[/green]")


@guideline_cmd.command("list")
@click.argument("project_id", type=int)
@click.pass_context
def list_cmd(ctx, project_id: int):
    """List the project's guidelines in the order they are applied."""
    project = require_project(ctx, project_id)
    guidelines = ctx.obj["store"].list_guidelines(project.id)
    if not guidelines:
        console.print("[yellow]No guidelines for this project.[/yellow]")
        return
    for g in guidelines:
        console.print(f"[bold][{g.id}][/bold] {escape(g.rule_text)}")


@guideline_cmd.command("remove")
@click.argument("project_id", type=int)
@click.argument("guideline_id", type=int)
@click.pass_context
def remove_cmd(ctx, project_id: int, guideline_id: int):
    """Remove one guideline from the project."""
    project = require_project(ctx, project_id)
    if not ctx.obj["store"].delete_guideline(guideline_id, project.id):
        raise click.ClickException(f"Guideline {guideline_id} not found.")
    console.print(f"[green]Removed guideline [{guideline_id}].[/green]")
