from pathlib import Path

from taskalert.diff import build_diff_md, diff_notifications, load_notifications
from taskalert.models import Notification
from taskalert.storage import write_json


def _notification(task_id: str, urgency: str, days: int) -> dict:
    return {"taskId": task_id, "title": f"Task {task_id}", "dueDate": "2024-05-10", "urgency": urgency, "daysUntil": days}


def _write_run(path: Path, notifications: list[dict]) -> None:
    path.mkdir(parents=True, exist_ok=True)
    write_json(path / "notifications.json", {"notifications": notifications, "count": len(notifications)})


def test_diff_logic(tmp_path: Path):
    previous = tmp_path / "prev"
    current = tmp_path / "curr"

    _write_run(
        previous,
        [
            _notification("1", "medium", 2),
            _notification("2", "high", 1),
            _notification("3", "high", 0),
        ],
    )
    _write_run(
        current,
        [
            _notification("1", "high", 1),
            _notification("3", "high", 0),
            _notification("4", "overdue", -1),
        ],
    )

    delta = diff_notifications(load_notifications(previous), load_notifications(current))

    assert [item.task_id for item in delta.raised] == ["4"]
    assert [item.task_id for item in delta.resolved] == ["2"]
    assert [(before.urgency, after.urgency) for before, after in delta.escalated] == [("medium", "high")]


def test_load_notifications_accepts_bare_list(tmp_path: Path):
    write_json(tmp_path / "notifications.json", [_notification("1", "high", 0)])
    [notification] = load_notifications(tmp_path)
    assert notification.task_id == "1"


def test_eased_urgency_is_not_escalation():
    before = Notification.model_validate(_notification("1", "overdue", -1))
    after = Notification.model_validate(_notification("1", "high", 0))
    delta = diff_notifications([before], [after])
    assert delta.escalated == []
    assert delta.raised == []
    assert delta.resolved == []


def test_diff_md_sections():
    delta = diff_notifications([], [Notification.model_validate(_notification("9", "high", 1))])
    markdown = build_diff_md(delta)
    assert "## Newly raised\n- 9: Task 9 (high)" in markdown
    assert "## Escalated\n- None" in markdown
