import logging

import redis
from fastapi import HTTPException, Request

from resort.api.deps import client_ip
from resort.core import messages
from resort.core.config import settings

logger = logging.getLogger(__name__)

_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    global _client
    if _client is None:
        _client = redis.Redis.from_url(settings.REDIS_URL, socket_timeout=1, socket_connect_timeout=1)
    return _client


class RateLimiter:
    """Fixed-window per-IP limiter, used as a route dependency.

    When Redis is unreachable the request is let through and a warning is logged.
    """

    def __init__(self, name: str, limit: int, window_seconds: int,
                 message: str = messages.TOO_MANY_REQUESTS, client: redis.Redis | None = None):
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message
        self.client = client

    def _redis(self) -> redis.Redis:
        return self.client or get_redis()

    def hit(self, key: str) -> int:
        redis_key = f"ratelimit:{self.name}:{key}"
        # The window TTL is set in the same MULTI as the first increment
        pipe = self._redis().pipeline()
        pipe.set(redis_key, 0, ex=self.window_seconds, nx=True)
        pipe.incr(redis_key)
        _, count = pipe.execute()
        return int(count)

    def __call__(self, request: Request) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return
        ip = client_ip(request)
        try:
            count = self.hit(ip)
        except redis.RedisError:
            logger.warning("Rate limiter %s unavailable, allowing request from %s", self.name, ip, exc_info=True)
            return
        if count > self.limit:
            logger.info("Rate limit %s exceeded by %s (%s/%s)", self.name, ip, count, self.limit)
            raise HTTPException(status_code=429, detail=self.message)


booking_limiter = RateLimiter("booking", settings.RATE_LIMIT_BOOKING_PER_HOUR, 60 * 60, messages.BOOKING_LIMIT_EXCEEDED)
otp_limiter = RateLimiter("otp", settings.RATE_LIMIT_OTP_PER_10_MIN, 10 * 60, messages.OTP_LIMIT_EXCEEDED)
login_limiter = RateLimiter("login", settings.RATE_LIMIT_LOGIN_PER_15_MIN, 15 * 60, messages.LOGIN_LIMIT_EXCEEDED)
