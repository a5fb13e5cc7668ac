"""Caller identity resolution.

Authentication itself is out of scope: the CLI acts on behalf of whichever
user id it is given. Every ownership check downstream compares against
this value.

Resolution order (stops at first success):
  1. --user option
  2. CODELENS_USER_ID environment variable
"""

from __future__ import annotations

import logging
import os

import click

logger = logging.getLogger(__name__)

USER_ENV = "CODELENS_USER_ID"


def resolve_user_id(explicit: str | None = None) -> str | None:
    """Return the acting user id or None if none is available."""
    if explicit:
        return explicit
    user_id = os.environ.get(USER_ENV)
    if user_id:
        logger.debug("Resolved user id from %s.", USER_ENV)
        return user_id
    return None


def require_user(ctx: click.Context) -> str:
    """Return the resolved user id or fail with a usage error."""
    user_id = ctx.obj.get("user_id") if ctx.obj else None
    if not user_id:
        raise click.UsageError(f"No user id. Pass --user or set {USER_ENV}.")
    return user_id
