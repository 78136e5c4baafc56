"""Redis client factory."""

from redis.asyncio import Redis

from laundry.config import settings


def redis_client(url: str | None = None) -> Redis:
    """Async Redis client returning str values."""
    return Redis.from_url(url or settings.redis_url, decode_responses=True)
