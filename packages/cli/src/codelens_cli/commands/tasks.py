"""submit and tasks commands: create and list stored tasks."""

from __future__ import annotations

import click
from rich.console import Console

from codelens_cli.auth import require_user
from codelens_cli.render import tasks_table
from codelens_core.errors import InputValidation
from codelens_core.service import require_fields
from codelens_store.base import StoreError
from codelens_store.models import STATUS_EVALUATED, TaskRecord

console = Console()


@click.command("submit")
@click.option("--title", required=True, help="Short task title.")
@click.option("--description", required=True, help="What the code is supposed to do.")
@click.option(
    "--code-file",
    type=click.File("r"),
    default="-",
    show_default=True,
    help="File holding the code to review ('-' reads stdin).",
)
@click.pass_context
def submit_cmd(ctx, title: str, description: str, code_file):
    """Store a code sample as a new task owned by you.

    The task starts out pending. Run `codelens evaluate TASK_ID` to review it.
    """
    user_id = require_user(ctx)
    code = code_file.read()
    try:
        require_fields(title, description, code)
    except InputValidation as e:
        raise click.UsageError(e.message) from e

    try:
        task = ctx.obj["store"].create_task(TaskRecord(title=title, description=description, code=code, user_id=user_id))
    except StoreError as e:
        raise click.ClickException(f"Failed to save task: {e}") from e

    console.print(f"[green]Task created:[/green] {task.id}")


@click.command("tasks")
@click.option("--evaluated", is_flag=True, help="Only show evaluated tasks.")
@click.option("--unlocked", is_flag=True, help="Only show tasks whose full report is unlocked.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of tasks to show.")
@click.pass_context
def tasks_cmd(ctx, evaluated: bool, unlocked: bool, limit: int):
    """List your tasks, newest first."""
    user_id = require_user(ctx)
    try:
        tasks = ctx.obj["store"].list_tasks(
            user_id,
            status=STATUS_EVALUATED if evaluated else None,
            unlocked=True if unlocked else None,
        )
    except StoreError as e:
        raise click.ClickException(f"Failed to list tasks: {e}") from e

    if not tasks:
        console.print("[yellow]No tasks found.[/yellow]")
        return

    console.print(tasks_table(tasks[:limit]))
