"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from questlog.redis_client import redis_or_none


async def get_redis_or_none() -> AsyncGenerator[object, None]:
    """Yield the Redis client for post-commit event publishing, or None when disabled."""
    yield redis_or_none()
