"""init command — interactive setup wizard.

Writes the config file (.codezen.yml, or the --config path) with the Ollama
endpoint, model and database path so every later command picks them up
without flags.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
import requests
import yaml
from rich.console import Console
from rich.markup import escape

from codezen_core.config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

console = Console()


@click.command("init")
@click.option("--check/--no-check", default=True, show_default=True, help="Check that Ollama serves the chosen model.")
@click.pass_context
def init_cmd(ctx, check: bool):
    """Set up codezen in the current directory."""
    console.print("\n[bold cyan]codezen init[/bold cyan] — setup wizard\n")

    current = ctx.obj["config"] if ctx.obj else DEFAULT_CONFIG
    endpoint = click.prompt("Ollama generate endpoint", default=current["endpoint"])
    model = click.prompt("Model", default=current["model"])
    db_path = click.prompt("SQLite database path", default=current["store_path"])

    config: dict = {"endpoint": endpoint, "model": model}
    if db_path != DEFAULT_CONFIG["store_path"]:
        config["store_path"] = db_path

    if check:
        available = _list_ollama_models(endpoint)
        if available is None:
            console.print(f"[yellow]Could not reach Ollama at {escape(endpoint)}. Start it with `ollama serve`.[/yellow]")
        elif model not in available:
            console.print(f"[yellow]Model {escape(model)} is not pulled yet. Run `ollama pull {escape(model)}`.[/yellow]")
        else:
            console.print(f"[green]Ollama is serving {escape(model)}.[/green]")

    config_path = ctx.obj.get("config_path", ".codezen.yml") if ctx.obj else ".codezen.yml"
    _write_config(config, config_path)
    console.print(f"[green]Wrote {escape(config_path)}[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Create a project with: [bold]codezen project create NAME --language LANG[/bold]")


def _list_ollama_models(endpoint: str) -> list[str] | None:
    """Return the model names Ollama has pulled, or None when it is unreachable."""
    base = endpoint.split("/api/")[0]
    try:
        response = requests.get(f"{base}/api/tags", timeout=5)
        response.raise_for_status()
        models = response.json().get("models", [])
    except (requests.RequestException, ValueError, AttributeError) as e:
        logger.debug("Ollama probe failed: %s", e)
        return None
    return [m.get("name") for m in models if isinstance(m, dict)]


def _write_config(config: dict, config_path: str = ".codezen.yml") -> None:
    """Write or update the config file, preserving any existing keys."""
    path = Path(config_path)
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))
