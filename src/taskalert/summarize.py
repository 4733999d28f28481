from __future__ import annotations

from collections import Counter
from typing import Iterable

from .models import Notification

URGENCY_ORDER = ("overdue", "high", "medium")
URGENCY_HEADINGS = {
    "overdue": "Overdue",
    "high": "Due soon",
    "medium": "Upcoming",
}


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def urgency_counts(notifications: Iterable[Notification]) -> dict[str, int]:
    counter = Counter(notification.urgency for notification in notifications)
    return {urgency: counter.get(urgency, 0) for urgency in URGENCY_ORDER}


def describe_notification(notification: Notification) -> str:
    days = notification.days_until
    if days < 0:
        return f"overdue by {_plural(-days, 'day')}"
    if days == 0:
        return "due today"
    if days == 1:
        return "due tomorrow"
    return f"due in {_plural(days, 'day')}"


def build_notifications_md(notifications: list[Notification], reference_time: str) -> str:
    counts = urgency_counts(notifications)
    lines = [
        "# Notifications",
        "",
        f"Reference time: {reference_time}",
        "",
        "## Counts",
        f"- Total: {len(notifications)}",
    ]
    lines.extend(f"- {URGENCY_HEADINGS[urgency]}: {counts[urgency]}" for urgency in URGENCY_ORDER)

    for urgency in URGENCY_ORDER:
        lines.extend(["", f"## {URGENCY_HEADINGS[urgency]}"])
        tier = [item for item in notifications if item.urgency == urgency]
        if tier:
            lines.extend(
                f"- {item.task_id}: {item.title} ({describe_notification(item)}, {item.due_date})" for item in tier
            )
        else:
            lines.append("- None")
    return "\n".join(lines) + "\n"
