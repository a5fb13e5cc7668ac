"""report command: show a task's evaluation, gated on entitlement."""

from __future__ import annotations

import click
from rich.console import Console

from codelens_cli.auth import require_user
from codelens_cli.render import render_report
from codelens_core.entitlement import EntitlementGate
from codelens_core.errors import CodelensError

console = Console()


@click.command("report")
@click.argument("task_id")
@click.option("--lexer", default="python", show_default=True, help="Syntax highlighting for code snippets.")
@click.pass_context
def report_cmd(ctx, task_id: str, lexer: str):
    """Show TASK_ID's report.

    The score is always visible. Strengths and categorised improvements are
    shown only after the report has been unlocked.
    """
    user_id = require_user(ctx)
    try:
        view = EntitlementGate(ctx.obj["store"]).report(task_id, user_id)
    except CodelensError as e:
        raise click.ClickException(e.message) from e

    render_report(console, view, lexer)
