"""Optional Redis client for reward event broadcasts and rate limiting.

Redis is not required to serve the API: with ``QL_REDIS_URL`` empty the
client stays unset, events are skipped and requests are not rate limited.
"""

import redis.asyncio as redis

_client: redis.Redis | None = None


async def init_redis(url: str | None) -> None:
    """Create the client for ``url``, or leave Redis disabled when it is empty."""
    global _client  # noqa: PLW0603
    if not url:
        _client = None
        return
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
    )


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def redis_or_none() -> redis.Redis | None:
    """The configured client, or None when Redis is disabled."""
    return _client
