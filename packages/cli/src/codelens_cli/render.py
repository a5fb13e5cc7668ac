"""Rich rendering for reviews, reports and task lists."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from codelens_core.classifier import CATEGORY_TITLES, classify_improvements, split_code_fence

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rich.console import Console

    from codelens_core.classifier import ClassifiedImprovements
    from codelens_core.entitlement import ReportView
    from codelens_store.models import TaskRecord

_CATEGORY_STYLE = {
    "bug_fix": "red",
    "refactor": "cyan",
    "performance": "magenta",
    "other": "white",
}


def _score_style(score) -> str:
    if score is None:
        return "dim"
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def _format_score(score) -> str:
    if score is None:
        return "-"
    return f"{score:g}" if isinstance(score, float) else str(score)


def render_improvement(console: Console, text: str, lexer: str = "python") -> None:
    parts = split_code_fence(text)
    if parts.before:
        console.print(f"  • {escape(parts.before)}")
    if parts.code:
        console.print(Syntax(parts.code, lexer, theme="monokai", line_numbers=False, word_wrap=True))
    if parts.after:
        console.print(f"    {escape(parts.after)}")


def render_improvements(console: Console, improvements: ClassifiedImprovements, lexer: str = "python") -> None:
    for category, items in improvements.by_category().items():
        if not items:
            continue
        style = _CATEGORY_STYLE[category.value]
        console.print(f"\n[bold {style}]{CATEGORY_TITLES[category]}[/bold {style}] ({len(items)})")
        for item in items:
            render_improvement(console, item, lexer)


def render_strengths(console: Console, strengths: Iterable[str]) -> None:
    console.print("\n[bold green]Strengths[/bold green]")
    for s in strengths:
        console.print(f"  • {escape(s)}")


def render_review(console: Console, review: dict, lexer: str = "python") -> None:
    """Render a full review (as returned by the evaluate action)."""
    score = review["score"]
    style = _score_style(score)
    console.print(Panel(f"[bold {style}]{_format_score(score)}[/bold {style}] / 100", title="Score", expand=False))
    render_strengths(console, review["strengths"])
    render_improvements(console, classify_improvements(review["improvements"]), lexer)


def render_report(console: Console, view: ReportView, lexer: str = "python") -> None:
    style = _score_style(view.score)
    header = (
        f"[bold]{escape(view.title)}[/bold]\n"
        f"Status: {view.status}   Score: [{style}]{_format_score(view.score)}[/{style}]   "
        f"Report: {'unlocked' if view.is_unlocked else 'locked'}"
    )
    console.print(Panel(header, title=f"Task {view.task_id}", expand=False))

    if view.score is None:
        console.print(f"[yellow]Not evaluated yet. Run `codelens evaluate {view.task_id}`.[/yellow]")
        return
    if not view.is_unlocked:
        console.print(
            "[yellow]The full report is locked. Run "
            f"`codelens checkout {view.task_id}` to pay, then `codelens unlock {view.task_id}`.[/yellow]"
        )
        return
    render_strengths(console, view.strengths or ())
    if view.improvements is not None:
        render_improvements(console, view.improvements, lexer)


def tasks_table(tasks: list[TaskRecord]) -> Table:
    table = Table(title="Tasks", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Title", max_width=40)
    table.add_column("Status")
    table.add_column("Score", justify="right")
    table.add_column("Report")
    table.add_column("Created At", no_wrap=True)

    for t in tasks:
        evaluation = t.evaluation()
        score = evaluation.score if evaluation else None
        style = _score_style(score)
        table.add_row(
            t.id[:8],
            escape(t.title[:40]),
            t.status,
            f"[{style}]{_format_score(score)}[/{style}]",
            "[green]unlocked[/green]" if t.is_report_unlocked else "locked",
            t.created_at[:19].replace("T", " "),
        )
    return table
