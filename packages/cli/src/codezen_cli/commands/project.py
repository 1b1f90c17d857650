"""project commands — create, list, show and delete projects."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from codezen_cli.auth import current_user

console = Console()


def require_project(ctx: click.Context, project_id: int):
    """Return the acting user's project or fail with a not-found error."""
    project = ctx.obj["store"].get_project(project_id, current_user(ctx).id)
    if project is None:
        raise click.ClickException(f"Project {project_id} not found.")
    return project


@click.group("project")
def project_cmd():
    """Manage your projects."""


@project_cmd.command("create")
@click.argument("name")
@click.option("--language", "-l", required=True, help="Language tag used to fence submitted code (e.g. python).")
@click.pass_context
def create_cmd(ctx, name: str, language: str):
    """Register a new project."""
    if not name.strip():
        raise click.UsageError("Project name must not be empty.")
    if not language.strip():
        raise click.UsageError("Language must not be empty.")
    project = ctx.obj["store"].create_project(current_user(ctx).id, name.strip(), language.strip())
    console.print(f"[green]Created project #{project.id}: {escape(project.name)} ({escape(project.language)})[/green]")


@project_cmd.command("list")
@click.pass_context
def list_cmd(ctx):
    """List your projects, newest first."""
    projects = ctx.obj["store"].list_projects(current_user(ctx).id)
    if not projects:
        console.print("[yellow]No projects yet. Create one with `codezen project create`.[/yellow]")
        return

    table = Table(title="Projects", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold", width=6)
    table.add_column("Name", max_width=40)
    table.add_column("Language", width=12)
    table.add_column("Created At", width=20)
    for p in projects:
        table.add_row(f"#{p.id}", escape(p.name), escape(p.language), p.created_at[:19].replace("T", " "))
    console.print(table)


@project_cmd.command("show")
@click.argument("project_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print the project and its guidelines as JSON.")
@click.pass_context
def show_cmd(ctx, project_id: int, as_json: bool):
    """Show a project and its guidelines."""
    project = require_project(ctx, project_id)
    guidelines = ctx.obj["store"].list_guidelines(project.id)

    if as_json:
        data = project.to_dict()
        data["guidelines"] = [g.to_dict() for g in guidelines]
        click.echo(json.dumps(data, indent=2))
        return

    console.print(f"[bold]#{project.id} {escape(project.name)}[/bold]  [dim]{escape(project.language)}[/dim]")
    console.print(f"  Created: {project.created_at[:19].replace('T', ' ')}")
    if guidelines:
        console.print("  Guidelines:")
        for g in guidelines:
            console.print(f"    [{g.id}] {escape(g.rule_text)}")
    else:
        console.print("  [dim]No custom guidelines.[/dim]")


@project_cmd.command("delete")
@click.argument("project_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def delete_cmd(ctx, project_id: int, yes: bool):
    """Delete a project with all its guidelines, reviews and conversations."""
    project = require_project(ctx, project_id)
    if not yes:
        click.confirm(f"Delete project #{project.id} ({project.name}) and all its reviews?", abort=True)
    if not ctx.obj["store"].delete_project(project.id, current_user(ctx).id):
        raise click.ClickException(f"Project {project_id} not found.")
    console.print(f"[green]Deleted project #{project.id}.[/green]")
