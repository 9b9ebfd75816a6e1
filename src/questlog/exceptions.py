"""Domain exceptions raised by services and mapped to HTTP responses."""

from __future__ import annotations


class QuestlogError(Exception):
    """Base class for domain errors. Carries the HTTP status the API maps it to."""

    status_code: int = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class DomainValidationError(QuestlogError):
    status_code = 400


class NotFoundError(QuestlogError):
    status_code = 404


class ConflictError(QuestlogError):
    status_code = 409


class TaskAlreadyCompleteError(ConflictError):
    """Raised when a completion is requested for a task that is already complete."""

    def __init__(self, task_id: int) -> None:
        super().__init__("Task is already complete")
        self.task_id = task_id
