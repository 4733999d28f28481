from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from . import __version__
from .diff import build_diff_md, diff_notifications, load_notifications
from .errors import TaskStoreError
from .log import get_logger
from .models import NotificationDelta, NotificationFeed, RunMeta
from .notifications import build_notifications
from .storage import ensure_run_dir, read_json, write_json
from .summarize import build_notifications_md, urgency_counts
from .task_client import TaskStoreClient

logger = get_logger(__name__)


@dataclass
class RunResult:
    feed: NotificationFeed
    run_path: Path | None = None
    delta: NotificationDelta | None = None
    warnings: list[str] = field(default_factory=list)


def load_tasks_file(path: Path) -> list[Any]:
    """Read a task snapshot file: either a bare list or a ``{"tasks": [...]}`` envelope."""
    data = read_json(path)
    if isinstance(data, dict):
        data = data.get("tasks", [])
    return data


def run_notifications(
    now: datetime,
    base_dir: Path,
    client: TaskStoreClient | None = None,
    tasks_path: Path | None = None,
    diff_path: Path | None = None,
    save: bool = True,
) -> RunResult:
    warnings: list[str] = []
    available = True
    if tasks_path is not None:
        tasks = load_tasks_file(tasks_path)
        source = str(tasks_path)
    elif client is not None:
        source = client.base_url
        try:
            tasks = client.get_tasks()
        except TaskStoreError as exc:
            logger.warning("Task store unavailable, returning an empty feed: %s", exc)
            warnings.append(str(exc))
            tasks = []
            available = False
    else:
        raise ValueError("Either a task store client or a tasks file is required.")

    notifications = build_notifications(tasks, now)
    feed = NotificationFeed(notifications=notifications, count=len(notifications), available=available)
    logger.info("Built %d notifications from %s", feed.count, source)

    delta = None
    if diff_path is not None:
        delta = diff_notifications(load_notifications(diff_path), feed.notifications)

    result = RunResult(feed=feed, delta=delta, warnings=warnings)
    if save:
        timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
        result.run_path = write_run(
            base_dir=base_dir,
            timestamp=timestamp,
            now=now,
            feed=feed,
            source=source,
            warnings=warnings,
            delta=delta,
        )
    return result


def write_run(
    base_dir: Path,
    timestamp: str,
    now: datetime,
    feed: NotificationFeed,
    source: str,
    warnings: list[str],
    delta: NotificationDelta | None = None,
) -> Path:
    path = ensure_run_dir(base_dir, timestamp)
    counts = {"total": feed.count, **urgency_counts(feed.notifications)}

    meta = RunMeta(
        timestamp=timestamp,
        reference_time=now.isoformat(),
        tool_version=__version__,
        source=source,
        available=feed.available,
        counts=counts,
        warnings=warnings,
    )

    write_json(path / "meta.json", meta.model_dump())
    write_json(path / "notifications.json", feed.model_dump(mode="json", by_alias=True))
    (path / "NOTIFICATIONS.md").write_text(
        build_notifications_md(feed.notifications, now.isoformat()), encoding="utf-8"
    )
    if delta is not None:
        (path / "DIFF.md").write_text(build_diff_md(delta), encoding="utf-8")
    return path
