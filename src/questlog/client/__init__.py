"""Async client for the Questlog API with optimistic local state."""

from questlog.client.api import APIClient, StaticSession
from questlog.client.config import ClientSettings
from questlog.client.errors import (
    APIError,
    AuthenticationRequired,
    ClientError,
    NetworkError,
    ProfileNotFound,
    TaskAlreadyComplete,
    TaskValidationError,
)
from questlog.client.store import TaskStore

__all__ = [
    "APIClient",
    "APIError",
    "AuthenticationRequired",
    "ClientError",
    "ClientSettings",
    "NetworkError",
    "ProfileNotFound",
    "StaticSession",
    "TaskAlreadyComplete",
    "TaskStore",
    "TaskValidationError",
]
