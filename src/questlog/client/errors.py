"""Client-side error taxonomy."""

from __future__ import annotations


class ClientError(Exception):
    """Base class for every error raised by the Questlog client."""


class NetworkError(ClientError):
    """Transport failure or server error that persisted through retries. Retryable."""


class TaskValidationError(ClientError):
    """Task input rejected locally; nothing was sent."""


class AuthenticationRequired(ClientError):
    """No session, or the server rejected the token. Callers send the user to login."""


class APIError(ClientError):
    """The server rejected the request with a 4xx response."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class ProfileNotFound(APIError):
    """Authenticated, but the profile row has not been created yet."""


class TaskAlreadyComplete(APIError):
    """The server already recorded this completion; nothing further was awarded."""

    def __init__(self, task_id: int, detail: str = "Task is already complete") -> None:
        super().__init__(409, detail)
        self.task_id = task_id
