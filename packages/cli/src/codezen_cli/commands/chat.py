"""chat commands — follow-up questions on a review."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.markup import escape

from codezen_cli.auth import current_user
from codezen_cli.commands.review import build_gateway
from codezen_core.conversation import ConversationService
from codezen_store.models import CommentRole

console = Console()


def _print_comment(comment) -> None:
    who = "[bold cyan]You[/bold cyan]" if comment.role == CommentRole.USER else "[bold green]CodeZen[/bold green]"
    console.print(f"{who} [dim]{comment.timestamp[:19].replace('T', ' ')}[/dim]")
    console.print(escape(comment.message))
    console.print()


@click.group("chat")
def chat_cmd():
    """Discuss a review with the model."""


@chat_cmd.command("ask")
@click.argument("project_id", type=int)
@click.argument("review_id", type=int)
@click.argument("question")
@click.pass_context
def ask_cmd(ctx, project_id: int, review_id: int, question: str):
    """Ask QUESTION about a review; the model sees the code, its review and the thread so far."""
    if not question.strip():
        raise click.UsageError("Question must not be empty.")

    service = ConversationService(ctx.obj["store"], build_gateway(ctx))
    exchange = service.ask(review_id, project_id, question, current_user(ctx).id)
    if exchange is None:
        raise click.ClickException(f"Review {review_id} not found.")
    _print_comment(exchange.answer)


@chat_cmd.command("history")
@click.argument("project_id", type=int)
@click.argument("review_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print the thread as JSON.")
@click.pass_context
def history_cmd(ctx, project_id: int, review_id: int, as_json: bool):
    """Show the conversation on a review, oldest first."""
    comments = ConversationService(ctx.obj["store"], gateway=None).history(review_id, project_id, current_user(ctx).id)
    if comments is None:
        raise click.ClickException(f"Review {review_id} not found.")

    if as_json:
        click.echo(json.dumps([c.to_dict() for c in comments], indent=2))
        return
    if not comments:
        console.print("[yellow]No conversation on this review yet.[/yellow]")
        return
    for comment in comments:
        _print_comment(comment)
