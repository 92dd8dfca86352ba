"""Redis client for short-lived registration state with TTL."""

import logging

from redis.asyncio import Redis

from jobdesk.core.config import settings

logger = logging.getLogger(__name__)

# Async Redis client
_redis_client: Redis | None = None


async def get_redis() -> Redis:
    """Get or create async Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(
            settings.redis_url,
            decode_responses=True,
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


class OtpStore:
    """One-time registration codes stored in Redis with automatic expiry.

    Each pending account has a code key and an attempts counter; both expire
    together after ``ttl_seconds``.
    """

    PREFIX = "otp:"
    ATTEMPTS_PREFIX = "otp_attempts:"

    def __init__(self, redis: Redis, ttl_seconds: int | None = None):
        self.redis = redis
        self.ttl_seconds = ttl_seconds or settings.otp_ttl_seconds

    async def put(self, user_id: str, code: str) -> None:
        """Store a fresh code, resetting the attempt counter."""
        pipe = self.redis.pipeline()
        pipe.setex(f"{self.PREFIX}{user_id}", self.ttl_seconds, code)
        pipe.delete(f"{self.ATTEMPTS_PREFIX}{user_id}")
        await pipe.execute()
        logger.debug(f"Stored OTP for user {user_id} (TTL: {self.ttl_seconds}s)")

    async def get(self, user_id: str) -> str | None:
        return await self.redis.get(f"{self.PREFIX}{user_id}")

    async def register_attempt(self, user_id: str) -> int:
        """Count a verification attempt and return the running total."""
        key = f"{self.ATTEMPTS_PREFIX}{user_id}"
        attempts = await self.redis.incr(key)
        if attempts == 1:
            await self.redis.expire(key, self.ttl_seconds)
        return int(attempts)

    async def delete(self, user_id: str) -> None:
        await self.redis.delete(
            f"{self.PREFIX}{user_id}", f"{self.ATTEMPTS_PREFIX}{user_id}"
        )
        logger.debug(f"Deleted OTP for user {user_id}")


async def get_otp_store() -> OtpStore:
    """FastAPI dependency for the OTP store."""
    return OtpStore(await get_redis())
