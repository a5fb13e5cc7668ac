"""review and evaluate commands: run the model review pipeline."""

from __future__ import annotations

import json

import click
from rich.console import Console

from codelens_cli.auth import require_user
from codelens_cli.render import render_review
from codelens_core.actions import evaluate_action
from codelens_core.errors import CodelensError
from codelens_core.service import ReviewService, build_provider

console = Console()

_MODEL_CHOICE = click.Choice(["gemini", "anthropic", "openai"])


def _config_with_model(ctx, model: str | None) -> dict:
    config = dict(ctx.obj["config"])
    if model:
        config["model"] = model
    return config


@click.command("review")
@click.option("--title", required=True, help="Short task title.")
@click.option("--description", required=True, help="What the code is supposed to do.")
@click.option(
    "--code-file",
    type=click.File("r"),
    default="-",
    show_default=True,
    help="File holding the code to review ('-' reads stdin).",
)
@click.option("--model", type=_MODEL_CHOICE, default=None, help="Model provider. Overrides config file.")
@click.option("--json", "as_json", is_flag=True, help="Print the raw review JSON.")
@click.option("--lexer", default="python", show_default=True, help="Syntax highlighting for code snippets.")
@click.pass_context
def review_cmd(ctx, title: str, description: str, code_file, model: str | None, as_json: bool, lexer: str):
    """Review a code sample once. Nothing is stored.

    \b
    Required environment variables (depending on --model):
      GEMINI_API_KEY       gemini (default)
      ANTHROPIC_API_KEY    anthropic
      OPENAI_API_KEY       openai
    """
    config = _config_with_model(ctx, model)
    body = {"title": title, "description": description, "code": code_file.read()}

    response = evaluate_action(body, lambda: build_provider(config))
    if not response.ok:
        raise click.ClickException(response.body["error"])

    if as_json:
        click.echo(json.dumps(response.body, indent=2))
    else:
        render_review(console, response.body, lexer)


@click.command("evaluate")
@click.argument("task_id")
@click.option("--model", type=_MODEL_CHOICE, default=None, help="Model provider. Overrides config file.")
@click.pass_context
def evaluate_cmd(ctx, task_id: str, model: str | None):
    """Review a stored task and save the score and findings on it.

    Only the score is shown here; `codelens report TASK_ID` shows the rest
    once the report is unlocked. Re-running replaces the previous evaluation.
    """
    user_id = require_user(ctx)
    config = _config_with_model(ctx, model)
    try:
        service = ReviewService(build_provider(config), ctx.obj["store"])
        review = service.evaluate(task_id, user_id)
    except CodelensError as e:
        raise click.ClickException(e.message) from e
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    console.print(f"[green]Task {task_id} evaluated.[/green] Score: [bold]{review.score}[/bold] / 100")
    console.print(
        f"{len(review.strengths)} strengths, {len(review.improvements)} improvements. "
        f"Run `codelens report {task_id}` to view them."
    )
