"""Acting-user resolution with git config fallback.

CodeZen has no accounts of its own: the user is identified by an email and
provisioned in the store on first use.

Resolution order (stops at first success):
  1. --user option / CODEZEN_USER environment variable
  2. `git config user.email` (the identity the developer already commits with)
"""

from __future__ import annotations

import logging
import os
import subprocess

import click

logger = logging.getLogger(__name__)


def resolve_user_email(explicit: str | None = None) -> str | None:
    """Return the acting user's email or None if no source is available.

    Never raises — callers should check for None and emit a UsageError.
    """
    if explicit:
        return explicit.strip() or None

    email = os.environ.get("CODEZEN_USER")
    if email:
        return email.strip()

    try:
        result = subprocess.run(
            ["git", "config", "user.email"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            git_email = result.stdout.strip()
            if git_email:
                logger.debug("Resolved user via git config.")
                return git_email
    except (FileNotFoundError, subprocess.TimeoutExpired):
        # git missing or hung; fall through.
        pass

    return None


def current_user(ctx: click.Context):
    """Return the provisioned User for this invocation, creating it on first use."""
    email = ctx.obj.get("user_email")
    if not email:
        raise click.UsageError("No user configured. Pass --user EMAIL, set CODEZEN_USER, or set git user.email.")
    user = ctx.obj.get("user")
    if user is None:
        user = ctx.obj["store"].ensure_user(email)
        ctx.obj["user"] = user
    return user
