"""CLI entry point for codelens.

Commands:
  submit    store a code sample as a new task
  tasks     list your tasks
  review    one-off review of a code sample, nothing stored
  evaluate  review a stored task and save the result on it
  checkout  create a payment order for a task's full report
  unlock    unlock a task's full report after a successful payment
  report    show a task's report (details only once unlocked)
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from codelens_cli.commands.payment import checkout_cmd, unlock_cmd
from codelens_cli.commands.report import report_cmd
from codelens_cli.commands.review import evaluate_cmd, review_cmd
from codelens_cli.commands.tasks import submit_cmd, tasks_cmd
from codelens_store.base import StoreError

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .codelens.yml settings.

    Store selection:
      store: memory → MemoryStore (nothing survives the process)
      (default)     → SQLiteStore (store_path or .codelens.db)

    This factory lives in cli.py so neither codelens_core nor codelens_store
    know about the CLI config format.
    """
    store_type = config.get("store", "sqlite")

    if store_type == "memory":
        from codelens_store.memory import MemoryStore

        return MemoryStore()

    if store_type != "sqlite":
        console.print(f"[yellow]Unknown store {store_type!r}. Falling back to sqlite.[/yellow]")

    from codelens_store.sqlite import SQLiteStore

    return SQLiteStore(db_path=config.get("store_path", ".codelens.db"))


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("codelens"),
    prog_name="codelens",
)
@click.option(
    "--config",
    "config_path",
    default=".codelens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="CODELENS_CONFIG",
)
@click.option("--user", "user_id", default=None, help="Act as this user id. Defaults to $CODELENS_USER_ID.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log verbosity (logs go to stderr).",
)
@click.pass_context
def main(ctx: click.Context, config_path: str, user_id: str | None, log_level: str):
    """AI code review for coding tasks, with a pay-to-unlock full report."""
    from codelens_core.config import load_config
    from codelens_cli.auth import resolve_user_id

    _setup_logging(log_level)
    ctx.ensure_object(dict)

    config = load_config(config_path)
    try:
        store = _build_store(config)
    except StoreError as e:
        raise click.ClickException(f"Could not open store: {e}") from e
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.obj["user_id"] = resolve_user_id(user_id)
    ctx.call_on_close(store.close)


main.add_command(submit_cmd)
main.add_command(tasks_cmd)
main.add_command(review_cmd)
main.add_command(evaluate_cmd)
main.add_command(checkout_cmd)
main.add_command(unlock_cmd)
main.add_command(report_cmd)
