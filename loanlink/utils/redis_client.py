from functools import lru_cache

from redis.asyncio import Redis

from loanlink.core.settings import settings

CHECK_TIMEOUT_SECONDS = 2.0


@lru_cache(maxsize=1)
def get_redis_client() -> Redis:
    """Client used by readiness checks against the rate-limit store."""
    return Redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=CHECK_TIMEOUT_SECONDS,
        socket_timeout=CHECK_TIMEOUT_SECONDS,
    )
