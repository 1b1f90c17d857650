"""CLI entry point for codezen.

Commands:
  init       — interactive setup wizard writing .codezen.yml
  project    — create, list, show and delete projects
  guideline  — manage a project's custom review guidelines
  review     — submit code for review and read past reviews
  chat       — ask follow-up questions about a review
  stats      — aggregate effort and findings across a project's reviews
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console

from codezen_cli.commands.chat import chat_cmd
from codezen_cli.commands.guideline import guideline_cmd
from codezen_cli.commands.init import init_cmd
from codezen_cli.commands.project import project_cmd
from codezen_cli.commands.review import review_cmd
from codezen_cli.commands.stats import stats_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the SQLite store at the configured path.

    This factory lives in cli.py so neither codezen_core nor codezen_store
    know about the CLI config format.
    """
    from codezen_store.sqlite import SQLiteStore

    return SQLiteStore(db_path=config.get("store_path", ".codezen.db"))


@click.group()
@click.version_option(
    version=importlib.metadata.version("codezen"),
    prog_name="codezen",
)
@click.option(
    "--config",
    "config_path",
    default=".codezen.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="CODEZEN_CONFIG",
)
@click.option("--user", "user_email", default=None, help="Acting user's email. Defaults to CODEZEN_USER or git.")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, user_email: str | None, verbose: bool):
    """AI code review against your project's own guidelines, on a local model."""
    from codezen_core.config import load_config
    from codezen_cli.auth import resolve_user_email

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path
    ctx.obj["user_email"] = resolve_user_email(user_email)

    # init only writes the config file; it must not create the database.
    if ctx.invoked_subcommand == "init":
        return
    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.call_on_close(store.close)


main.add_command(init_cmd)
main.add_command(project_cmd)
main.add_command(guideline_cmd)
main.add_command(review_cmd)
main.add_command(chat_cmd)
main.add_command(stats_cmd)
