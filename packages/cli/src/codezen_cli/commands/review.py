"""review commands — submit code for AI review and read past reviews."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from codezen_cli.auth import current_user
from codezen_cli.commands.project import require_project
from codezen_core.parsing import findings_of, parse_review
from codezen_core.reviewer import REVIEW_FALLBACK, ReviewService

console = Console()

_TYPE_STYLE = {"bug": "red", "security": "magenta", "performance": "yellow", "style": "blue"}


def build_gateway(ctx: click.Context):
    from codezen_core.providers import get_gateway

    try:
        return get_gateway(ctx.obj["config"])
    except ValueError as e:
        raise click.UsageError(str(e))


def print_review(review) -> None:
    """Render a review: decoded summary and findings when possible, raw text otherwise."""
    console.print(
        f"[bold]Review #{review.id}[/bold]  [dim]{review.timestamp[:19].replace('T', ' ')}[/dim]"
        + (f"  effort [bold]{escape(review.effort_estimation)}[/bold]" if review.effort_estimation else "")
    )

    if review.pending:
        console.print("[yellow]Pending: no reply from the model yet.[/yellow]")
        return
    if review.llm_response == REVIEW_FALLBACK:
        console.print(f"[red]{escape(review.llm_response)}[/red]")
        return

    parsed = parse_review(review.llm_response)
    if parsed is None:
        # The model ignored the JSON instruction; show what it said.
        console.print(escape(review.llm_response))
        return

    summary = parsed.get("summary")
    if summary:
        console.print(f"\n{escape(str(summary))}\n")

    findings = findings_of(parsed)
    if not findings:
        console.print("[green]No findings.[/green]")
        return

    table = Table(title=f"{len(findings)} finding(s)", show_header=True, header_style="bold cyan")
    table.add_column("Line", justify="right", width=6)
    table.add_column("Type", width=12)
    table.add_column("Message")
    table.add_column("Suggestion")
    for f in findings:
        kind = str(f.get("type", ""))
        style = _TYPE_STYLE.get(kind.lower(), "white")
        table.add_row(
            str(f.get("line", "")),
            f"[{style}]{escape(kind)}[/{style}]",
            escape(str(f.get("message", ""))),
            escape(str(f.get("suggestion", ""))),
        )
    console.print(table)


@click.group("review")
def review_cmd():
    """Submit code for review and browse past reviews."""


@review_cmd.command("submit")
@click.argument("project_id", type=int)
@click.argument("source", type=click.File("r"), default="-")
@click.option("--json", "as_json", is_flag=True, help="Print the stored review as JSON.")
@click.pass_context
def submit_cmd(ctx, project_id: int, source, as_json: bool):
    """Review SOURCE (a file, or stdin when omitted) against the project's guidelines.

    \b
    The model is called through the configured Ollama endpoint:
      OLLAMA_URL      generate endpoint (default http://localhost:11434/api/generate)
      OLLAMA_MODEL    model name (default codellama:7b)
    """
    code = source.read()
    if not code.strip():
        raise click.UsageError("No code to review: the input is empty.")

    project = require_project(ctx, project_id)
    service = ReviewService(ctx.obj["store"], build_gateway(ctx))

    if not as_json:
        console.print(f"[dim]Reviewing {len(code.splitlines())} line(s) with {ctx.obj['config']['model']}...[/dim]")
    review = service.submit_for_review(project.id, code, current_user(ctx).id)
    if review is None:
        raise click.ClickException(f"Project {project_id} not found.")

    if as_json:
        click.echo(json.dumps(review.to_dict(), indent=2))
    else:
        print_review(review)


def _reviews_table(reviews, title: str, with_project: bool = False) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold", width=6)
    if with_project:
        table.add_column("Project", width=8)
    table.add_column("Reviewed At", width=20)
    table.add_column("Status", width=10)
    table.add_column("Effort", width=8)
    table.add_column("Lines", justify="right", width=6)

    for r in reviews:
        if r.pending:
            status = "[yellow]pending[/yellow]"
        elif r.llm_response == REVIEW_FALLBACK:
            status = "[red]failed[/red]"
        else:
            status = "[green]done[/green]"
        row = [f"#{r.id}"]
        if with_project:
            row.append(f"#{r.project_id}")
        row += [
            r.timestamp[:19].replace("T", " "),
            status,
            escape(r.effort_estimation or "—"),
            str(len(r.code_snapshot.splitlines())),
        ]
        table.add_row(*row)
    return table


@review_cmd.command("list")
@click.argument("project_id", type=int)
@click.option("--limit", default=20, show_default=True, help="Maximum number of reviews to show.")
@click.pass_context
def list_cmd(ctx, project_id: int, limit: int):
    """Show a project's reviews, most recent first."""
    reviews = ReviewService(ctx.obj["store"], gateway=None).list_reviews(project_id, current_user(ctx).id)
    if reviews is None:
        raise click.ClickException(f"Project {project_id} not found.")
    if not reviews:
        console.print("[yellow]No reviews found.[/yellow]")
        return
    console.print(_reviews_table(reviews[:limit], f"Reviews — project #{project_id}"))


@review_cmd.command("mine")
@click.option("--limit", default=20, show_default=True, help="Maximum number of reviews to show.")
@click.pass_context
def mine_cmd(ctx, limit: int):
    """Show your reviews across all your projects, most recent first."""
    reviews = ReviewService(ctx.obj["store"], gateway=None).list_user_reviews(current_user(ctx).id)
    if not reviews:
        console.print("[yellow]No reviews found.[/yellow]")
        return
    console.print(_reviews_table(reviews[:limit], "Your reviews", with_project=True))


@review_cmd.command("show")
@click.argument("project_id", type=int)
@click.argument("review_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print the stored review as JSON.")
@click.option("--code", "show_code", is_flag=True, help="Also print the reviewed code snapshot.")
@click.pass_context
def show_cmd(ctx, project_id: int, review_id: int, as_json: bool, show_code: bool):
    """Show one review."""
    review = ReviewService(ctx.obj["store"], gateway=None).get_review(project_id, review_id, current_user(ctx).id)
    if review is None:
        raise click.ClickException(f"Review {review_id} not found.")

    if as_json:
        click.echo(json.dumps(review.to_dict(), indent=2))
        return
    if show_code:
        console.print(escape(review.code_snapshot))
    print_review(review)
