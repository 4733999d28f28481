"""Urgency classification and notification building for a user's task snapshot."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError

from .errors import InvalidInputError
from .log import get_logger
from .models import Notification, NotificationFeed, TaskSnapshot, Urgency

logger = get_logger(__name__)

HIGH_MAX_DAYS = 1
MEDIUM_MAX_DAYS = 3


def parse_due(value: Any) -> date | datetime | None:
    """Return the due value as a date or datetime, or None when missing or unparseable."""
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _calendar_date(due: date | datetime, now: datetime) -> date:
    if not isinstance(due, datetime):
        return due
    if due.tzinfo is not None and now.tzinfo is not None:
        return due.astimezone(now.tzinfo).date()
    return due.date()


def days_until(due: date | datetime, now: datetime) -> int:
    """Whole calendar days from now's date to the due date; negative when past due."""
    return (_calendar_date(due, now) - now.date()).days


def classify_urgency(days: int) -> Urgency | None:
    if days < 0:
        return "overdue"
    if days <= HIGH_MAX_DAYS:
        return "high"
    if days <= MEDIUM_MAX_DAYS:
        return "medium"
    return None


def _check_inputs(tasks: Any, now: Any) -> None:
    if not isinstance(now, datetime):
        raise InvalidInputError(f"now must be a datetime, got {type(now).__name__}")
    if isinstance(tasks, (str, bytes, Mapping)) or not isinstance(tasks, Iterable):
        raise InvalidInputError(f"tasks must be a collection of tasks, got {type(tasks).__name__}")


def _coerce_task(item: Any) -> TaskSnapshot | None:
    if isinstance(item, TaskSnapshot):
        return item
    if not isinstance(item, Mapping):
        return None
    try:
        return TaskSnapshot.model_validate(item)
    except ValidationError:
        return None


def _sort_key(notification: Notification) -> tuple[int, str, str]:
    return (notification.days_until, notification.title.casefold(), notification.task_id)


def build_notifications(tasks: Iterable[TaskSnapshot | Mapping[str, Any]], now: datetime) -> list[Notification]:
    """Build the ordered notification list for one user's tasks.

    Completed tasks, tasks without a usable due date and tasks due more than
    ``MEDIUM_MAX_DAYS`` days after ``now`` are dropped. The rest are sorted by
    ``days_until`` then case-insensitive title.

    Raises:
        InvalidInputError: ``tasks`` is not a collection or ``now`` is not a datetime.
    """
    _check_inputs(tasks, now)

    seen: set[str] = set()
    total = 0
    notifications: list[Notification] = []
    skipped = 0
    for item in tasks:
        total += 1
        task = _coerce_task(item)
        if task is None:
            skipped += 1
            continue
        if task.id in seen:
            logger.debug("Duplicate task id %s ignored", task.id)
            continue
        seen.add(task.id)
        if task.completed:
            continue
        due = parse_due(task.due_date)
        if due is None:
            continue
        days = days_until(due, now)
        urgency = classify_urgency(days)
        if urgency is None:
            continue
        notifications.append(
            Notification(
                task_id=task.id,
                title=task.title,
                due_date=due.isoformat(),
                urgency=urgency,
                days_until=days,
            )
        )

    if skipped:
        logger.debug("Skipped %d malformed task records", skipped)
    notifications.sort(key=_sort_key)
    logger.debug("Built %d notifications from %d tasks", len(notifications), total)
    return notifications


def build_feed(tasks: Iterable[TaskSnapshot | Mapping[str, Any]], now: datetime) -> NotificationFeed:
    notifications = build_notifications(tasks, now)
    return NotificationFeed(notifications=notifications, count=len(notifications))
