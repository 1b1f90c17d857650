"""stats command — aggregate effort and findings across a project's reviews."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from codezen_cli.commands.project import require_project
from codezen_core.prompts import FINDING_TYPES
from codezen_core.reviewer import summarize_reviews

console = Console()


@click.command("stats")
@click.argument("project_id", type=int)
@click.pass_context
def stats_cmd(ctx, project_id: int):
    """Show aggregated review statistics for a project.

    Reports how many reviews completed or failed, the average effort
    estimate, and which kinds of findings come up most, which helps decide
    what deserves a custom guideline.
    """
    project = require_project(ctx, project_id)
    reviews = ctx.obj["store"].list_reviews(project.id)
    if not reviews:
        console.print("[yellow]No reviews found for this project.[/yellow]")
        return

    stats = summarize_reviews(reviews)

    # --- Summary ---
    console.print(f"\n[bold]Review stats for [cyan]{escape(project.name)}[/cyan][/bold]")
    console.print(f"  Total reviews:  {stats.total}")
    console.print(f"  Completed:      {stats.completed}")
    if stats.pending:
        console.print(f"  Pending:        {stats.pending}")
    if stats.failed:
        console.print(f"  Failed:         {stats.failed}")
    if stats.mean_effort is not None:
        console.print(f"  Avg effort:     {stats.mean_effort:.1f}/10")

    # --- Finding types ---
    total_findings = sum(stats.finding_types.values())
    if total_findings:
        type_table = Table(title="Findings by Type", show_header=True)
        type_table.add_column("Type", style="bold")
        type_table.add_column("Count", justify="right")
        type_table.add_column("% of total", justify="right")
        _type_style = {"bug": "red", "security": "magenta", "performance": "yellow", "style": "blue"}
        for kind in [*FINDING_TYPES, "other"]:
            count = stats.finding_types.get(kind, 0)
            if kind == "other" and not count:
                continue
            style = _type_style.get(kind, "dim")
            type_table.add_row(f"[{style}]{kind}[/{style}]", str(count), f"{count / total_findings * 100:.1f}%")
        console.print(type_table)
