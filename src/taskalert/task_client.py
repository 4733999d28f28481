from __future__ import annotations

import time
from typing import Any

import httpx
from pydantic import ValidationError

from .errors import TaskStoreError
from .log import get_logger
from .models import TaskSnapshot

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000/api"


def _retry_after_seconds(value: str | None, default: float) -> float:
    """Seconds from a Retry-After header; HTTP-date or missing values fall back to default."""
    if not value:
        return default
    try:
        return max(0.0, float(value))
    except ValueError:
        return default


def normalize_task(raw: dict[str, Any]) -> dict[str, Any]:
    """Map a raw task-store record onto the TaskSnapshot field names."""
    status = str(raw.get("status") or "").upper()
    completed = bool(raw.get("completed") or raw.get("is_completed") or status == "COMPLETED")
    due = raw.get("dueDate", raw.get("due_date"))
    return {
        "id": str(raw.get("id") or ""),
        "title": raw.get("title") or "",
        "dueDate": due,
        "completed": completed,
    }


class TaskStoreClient:
    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        page_size: int = 100,
        transport: httpx.BaseTransport | None = None,
        sleep=time.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = {"Authorization": f"Bearer {token}"}
        self.page_size = page_size
        self.client = httpx.Client(timeout=30.0, headers=self.headers, transport=transport)
        self._sleep = sleep

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> TaskStoreClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        backoff = 1.0
        for attempt in range(5):
            response = self.client.request(method, url, params=params)
            if response.status_code != 429:
                return response
            retry_after = response.headers.get("Retry-After")
            wait = _retry_after_seconds(retry_after, backoff)
            logger.warning("Task store rate limited (attempt %d), retrying in %.1fs", attempt + 1, wait)
            self._sleep(wait)
            backoff *= 2
        return response

    def _get_paginated(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        collected: list[dict[str, Any]] = []
        page = 1
        params = params.copy() if params else {}
        params["limit"] = self.page_size
        while True:
            params["page"] = page
            response = self._request("GET", path, params=params)
            response.raise_for_status()
            try:
                payload = response.json()
            except ValueError as exc:
                raise TaskStoreError(f"Task store returned a non-JSON body: {exc}") from exc
            if isinstance(payload, list):
                collected.extend(payload)
                break
            if not isinstance(payload, dict):
                break
            items = payload.get("tasks") or payload.get("items") or payload.get("data")
            if isinstance(items, list):
                collected.extend(items)
            pagination = payload.get("pagination")
            if not isinstance(pagination, dict):
                pagination = {}
            total_pages = pagination.get("totalPages") or 1
            if not items or page >= total_pages:
                break
            page += 1
        return collected

    def get_raw_tasks(self) -> list[dict[str, Any]]:
        try:
            return self._get_paginated("/tasks", params={"status": "ALL"})
        except httpx.HTTPStatusError as exc:
            raise TaskStoreError(
                f"Task store error: {exc.response.status_code} {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            raise TaskStoreError(f"Network error while connecting to the task store: {exc}") from exc

    def get_tasks(self) -> list[TaskSnapshot]:
        """Fetch the current user's tasks; records without an id are dropped."""
        tasks = []
        for raw in self.get_raw_tasks():
            if not isinstance(raw, dict):
                logger.debug("Dropping non-object task record")
                continue
            normalized = normalize_task(raw)
            if not normalized["id"]:
                logger.debug("Dropping task record without id")
                continue
            try:
                tasks.append(TaskSnapshot.model_validate(normalized))
            except ValidationError:
                logger.debug("Dropping malformed task record %s", normalized["id"])
        return tasks
