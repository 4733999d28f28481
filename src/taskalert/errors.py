from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when the caller passes something that is not a task collection or a reference instant."""


class TaskStoreError(RuntimeError):
    """Raised when the upstream task store cannot be read."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
