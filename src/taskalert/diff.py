from __future__ import annotations

from pathlib import Path

from .models import Notification, NotificationDelta
from .storage import read_json

_SEVERITY = {"medium": 0, "high": 1, "overdue": 2}


def load_notifications(run_path: Path) -> list[Notification]:
    data = read_json(run_path / "notifications.json")
    items = data.get("notifications", []) if isinstance(data, dict) else data
    return [Notification.model_validate(item) for item in items]


def diff_notifications(previous: list[Notification], current: list[Notification]) -> NotificationDelta:
    """Compare two notification lists by task id.

    A task is escalated when its urgency tier became more severe; a task whose
    tier stayed the same or eased is not reported again.
    """
    previous_map = {item.task_id: item for item in previous}
    current_map = {item.task_id: item for item in current}

    raised = [item for item in current if item.task_id not in previous_map]
    resolved = [item for item in previous if item.task_id not in current_map]
    escalated = []
    for item in current:
        before = previous_map.get(item.task_id)
        if before and _SEVERITY[item.urgency] > _SEVERITY[before.urgency]:
            escalated.append((before, item))

    return NotificationDelta(raised=raised, escalated=escalated, resolved=resolved)


def build_diff_md(delta: NotificationDelta) -> str:
    lines = ["# Notification Diff", "", "## Newly raised"]
    if delta.raised:
        for item in delta.raised:
            lines.append(f"- {item.task_id}: {item.title} ({item.urgency})")
    else:
        lines.append("- None")

    lines.extend(["", "## Escalated"])
    if delta.escalated:
        for before, after in delta.escalated:
            lines.append(f"- {after.task_id}: {after.title} ({before.urgency} -> {after.urgency})")
    else:
        lines.append("- None")

    lines.extend(["", "## Resolved"])
    if delta.resolved:
        for item in delta.resolved:
            lines.append(f"- {item.task_id}: {item.title}")
    else:
        lines.append("- None")

    lines.extend(
        [
            "",
            "## Limitations",
            "- Resolved covers both completed tasks and tasks whose due date moved out of the window.",
        ]
    )
    return "\n".join(lines) + "\n"
