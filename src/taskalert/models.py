from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Urgency = Literal["overdue", "high", "medium"]


class TaskSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    title: str = ""
    # Raw value; parsed by notifications.parse_due.
    due_date: Any = Field(default=None, alias="dueDate")
    completed: bool = False


class Notification(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    task_id: str = Field(alias="taskId")
    title: str
    due_date: str = Field(alias="dueDate")
    urgency: Urgency
    days_until: int = Field(alias="daysUntil")


class NotificationFeed(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notifications: list[Notification] = Field(default_factory=list)
    count: int = 0
    available: bool = True


class NotificationDelta(BaseModel):
    raised: list[Notification] = Field(default_factory=list)
    escalated: list[tuple[Notification, Notification]] = Field(default_factory=list)
    resolved: list[Notification] = Field(default_factory=list)


class RunMeta(BaseModel):
    timestamp: str
    reference_time: str
    tool_version: str
    source: str
    available: bool
    counts: dict[str, int]
    warnings: list[str] = Field(default_factory=list)
