from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .diff import build_diff_md, diff_notifications, load_notifications
from .notifications import parse_due
from .runs import run_notifications
from .summarize import describe_notification, urgency_counts
from .task_client import DEFAULT_BASE_URL, TaskStoreClient

app = typer.Typer(help="Task due-date notifications CLI")
console = Console()

URGENCY_STYLES = {"overdue": "bold red", "high": "yellow", "medium": "cyan"}


def _load_dotenv() -> None:
    import importlib.util
    import importlib

    if importlib.util.find_spec("dotenv") is None:
        return
    dotenv = importlib.import_module("dotenv")
    dotenv.load_dotenv()


def _parse_now(value: str | None) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    parsed = parse_due(value)
    if not isinstance(parsed, datetime):
        raise ValueError("--now must be an ISO date-time, e.g. 2024-05-01T09:00:00+00:00")
    return parsed


@app.command()
def notify(
    tasks: Path | None = typer.Option(None, "--tasks", help="Read tasks from a JSON file instead of the API"),
    now: str | None = typer.Option(None, "--now", help="Reference time as an ISO date-time (default: now, UTC)"),
    diff: Path | None = typer.Option(None, "--diff", help="Path to a previous run"),
    as_json: bool = typer.Option(False, "--json", help="Print the notification feed as JSON"),
    no_save: bool = typer.Option(False, "--no-save", help="Do not write a run directory"),
) -> None:
    """Build notifications for tasks that are overdue or due within three days."""
    _load_dotenv()
    try:
        reference = _parse_now(now)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    base_dir = Path(os.getenv("TASKALERT_DATA_DIR", "./taskalert_data"))
    client = None
    if tasks is None:
        token = os.getenv("TASKALERT_API_TOKEN")
        if not token:
            raise typer.BadParameter("TASKALERT_API_TOKEN is required when --tasks is not given.")
        client = TaskStoreClient(token, base_url=os.getenv("TASKALERT_API_URL", DEFAULT_BASE_URL))

    try:
        result = run_notifications(
            now=reference,
            base_dir=base_dir,
            client=client,
            tasks_path=tasks,
            diff_path=diff,
            save=not no_save,
        )
    finally:
        if client is not None:
            client.close()

    feed = result.feed
    if as_json:
        console.print_json(feed.model_dump_json(by_alias=True))
        return

    if not feed.available:
        console.print("[red]Notifications unavailable: the task store could not be reached.[/red]")

    table = Table(title=f"Notifications ({feed.count})")
    table.add_column("Task")
    table.add_column("Title")
    table.add_column("Due")
    table.add_column("Urgency")
    table.add_column("When")
    for item in feed.notifications:
        table.add_row(
            item.task_id,
            item.title,
            item.due_date,
            f"[{URGENCY_STYLES[item.urgency]}]{item.urgency}[/]",
            describe_notification(item),
        )
    console.print(table)

    counts = urgency_counts(feed.notifications)
    console.print(f"Counts - Overdue: {counts['overdue']}, High: {counts['high']}, Medium: {counts['medium']}")
    if result.run_path:
        console.print(f"Run saved to: {result.run_path}")
    if result.delta is not None:
        console.print(
            f"Changes - Raised: {len(result.delta.raised)}, Escalated: {len(result.delta.escalated)}, "
            f"Resolved: {len(result.delta.resolved)}"
        )
    if result.warnings:
        console.print("Warnings:")
        for warning in result.warnings:
            console.print(f"- {warning}")


@app.command("diff")
def diff_runs(
    current: Path = typer.Argument(..., help="Path to the current run"),
    previous: Path = typer.Argument(..., help="Path to the previous run"),
) -> None:
    """Show which notifications were raised, escalated or resolved between two runs."""
    delta = diff_notifications(load_notifications(previous), load_notifications(current))
    console.print(build_diff_md(delta), markup=False, highlight=False)


if __name__ == "__main__":
    app()
