import json
from datetime import datetime, timezone
from pathlib import Path

import httpx

from taskalert.runs import load_tasks_file, run_notifications
from taskalert.storage import ensure_run_dir
from taskalert.task_client import TaskStoreClient

NOW = datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc)
FIXTURE = Path(__file__).parent / "fixtures" / "tasks.json"


def test_fixture_run_writes_outputs(tmp_path: Path):
    result = run_notifications(now=NOW, base_dir=tmp_path, tasks_path=FIXTURE)

    assert [item.task_id for item in result.feed.notifications] == ["t1", "t3", "t2", "t4"]
    assert [item.urgency for item in result.feed.notifications] == ["overdue", "high", "high", "medium"]
    assert result.feed.count == 4
    assert result.run_path is not None

    saved = json.loads((result.run_path / "notifications.json").read_text())
    assert saved["count"] == 4
    assert saved["notifications"][0]["taskId"] == "t1"
    meta = json.loads((result.run_path / "meta.json").read_text())
    assert meta["counts"] == {"total": 4, "overdue": 1, "high": 2, "medium": 1}
    assert meta["available"] is True
    assert (result.run_path / "NOTIFICATIONS.md").exists()
    assert not (result.run_path / "DIFF.md").exists()


def test_run_with_previous_writes_diff(tmp_path: Path):
    first = run_notifications(now=NOW, base_dir=tmp_path / "a", tasks_path=FIXTURE)
    later = datetime(2024, 5, 12, 9, 0, tzinfo=timezone.utc)
    second = run_notifications(now=later, base_dir=tmp_path / "b", tasks_path=FIXTURE, diff_path=first.run_path)

    assert second.delta is not None
    assert [after.task_id for _, after in second.delta.escalated] == ["t3", "t2", "t4"]
    assert [item.task_id for item in second.delta.raised] == []
    assert (second.run_path / "DIFF.md").exists()


def test_store_failure_degrades_to_empty_feed(tmp_path: Path):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="down")

    client = TaskStoreClient("token", transport=httpx.MockTransport(handler))
    try:
        result = run_notifications(now=NOW, base_dir=tmp_path, client=client, save=False)
    finally:
        client.close()

    assert result.feed.notifications == []
    assert result.feed.available is False
    assert result.warnings
    assert result.run_path is None


def test_load_tasks_file_accepts_bare_list(tmp_path: Path):
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps([{"id": "1"}]))
    assert load_tasks_file(path) == [{"id": "1"}]


def test_non_json_store_response_degrades_to_empty_feed(tmp_path: Path):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    client = TaskStoreClient("token", transport=httpx.MockTransport(handler))
    try:
        result = run_notifications(now=NOW, base_dir=tmp_path, client=client, save=False)
    finally:
        client.close()

    assert result.feed.available is False
    assert result.feed.notifications == []


def test_malformed_store_records_do_not_break_the_run(tmp_path: Path):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=["junk", {"id": "1", "title": 42, "dueDate": "2024-05-10"}, {"id": "2", "title": "Ok", "dueDate": "2024-05-10"}],
        )

    client = TaskStoreClient("token", transport=httpx.MockTransport(handler))
    try:
        result = run_notifications(now=NOW, base_dir=tmp_path, client=client, save=False)
    finally:
        client.close()

    assert result.feed.available is True
    assert [item.task_id for item in result.feed.notifications] == ["2"]


def test_same_second_runs_get_distinct_directories(tmp_path: Path):
    first = ensure_run_dir(tmp_path, "2024-05-10_090000")
    second = ensure_run_dir(tmp_path, "2024-05-10_090000")
    assert first != second
    assert second.name == "2024-05-10_090000-2"


def test_non_ascii_titles_are_written(tmp_path: Path):
    tasks = tmp_path / "tasks.json"
    tasks.write_text(json.dumps([{"id": "1", "title": "Relatório façade ✓", "dueDate": "2024-05-10"}]), encoding="utf-8")
    result = run_notifications(now=NOW, base_dir=tmp_path, tasks_path=tasks)
    assert "Relatório façade ✓" in (result.run_path / "NOTIFICATIONS.md").read_text(encoding="utf-8")
