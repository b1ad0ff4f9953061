"""
Sliding window rate limiting for post creation.

The Redis limiter keeps one sorted set of acceptance timestamps per identity
and updates it with a single Lua script that reads the Redis server clock, so
every service instance sees the same count regardless of local clock skew.
``InMemoryRateLimiter`` has the same window semantics but only counts within
one process.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import deque
from typing import Callable, Deque, Dict, Protocol

import redis

from ..core.config import settings
from ..core.errors import RateLimiterUnavailableError, RateLimitError

logger = logging.getLogger(__name__)

LOG_RATE_LIMITED = "RATE_LIMITED identity_id=%s limit=%s window=%ss"

# KEYS[1]=key ARGV: now_ms (empty to use the server clock), window_ms, limit, member
SLIDING_WINDOW_SCRIPT = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
if not now then
  local t = redis.call('TIME')
  now = tonumber(t[1]) * 1000 + math.floor(tonumber(t[2]) / 1000)
end
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])
redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
if redis.call('ZCARD', key) >= limit then
  return 0
end
redis.call('ZADD', key, now, ARGV[4])
redis.call('PEXPIRE', key, window)
return 1
"""


class RateLimiter(Protocol):
    def try_acquire(self, identity_id: str) -> None:
        """Record one operation for ``identity_id`` or raise RateLimitError."""
        ...


class RedisSlidingWindowRateLimiter:
    """Window timestamps come from the Redis server clock unless ``clock`` is given."""

    def __init__(
        self,
        client: redis.Redis,
        limit: int = 3,
        window_seconds: int = 60,
        prefix: str = "ratelimit:posts",
        clock: Callable[[], float] | None = None,
    ):
        self.client = client
        self.limit = limit
        self.window_seconds = window_seconds
        self.prefix = prefix
        self._clock = clock
        self._script = client.register_script(SLIDING_WINDOW_SCRIPT)

    def _key(self, identity_id: str) -> str:
        return f"{self.prefix}:{identity_id}"

    def try_acquire(self, identity_id: str) -> None:
        now_ms = int(self._clock() * 1000) if self._clock else ""
        try:
            admitted = self._script(
                keys=[self._key(identity_id)],
                args=[now_ms, self.window_seconds * 1000, self.limit, uuid.uuid4().hex],
            )
        except redis.RedisError as exc:
            logger.error("Rate limiter backend failed for identity_id=%s: %s", identity_id, exc)
            raise RateLimiterUnavailableError("Rate limiter unavailable") from exc
        if int(admitted) != 1:
            logger.info(LOG_RATE_LIMITED, identity_id, self.limit, self.window_seconds)
            raise RateLimitError()


class InMemoryRateLimiter:
    def __init__(
        self,
        limit: int = 3,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def _prune(self, cutoff: float) -> None:
        for identity_id in list(self._hits):
            hits = self._hits[identity_id]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[identity_id]

    def try_acquire(self, identity_id: str) -> None:
        with self._lock:
            now = self._clock()
            self._prune(now - self.window_seconds)
            hits = self._hits.get(identity_id)
            if hits is not None and len(hits) >= self.limit:
                logger.info(LOG_RATE_LIMITED, identity_id, self.limit, self.window_seconds)
                raise RateLimitError()
            self._hits.setdefault(identity_id, deque()).append(now)


def create_redis_client(url: str | None = None) -> redis.Redis:
    return redis.Redis.from_url(
        url or settings.redis_url,
        decode_responses=True,
        socket_timeout=settings.external_call_timeout_seconds,
        socket_connect_timeout=settings.external_call_timeout_seconds,
    )


def build_rate_limiter(client: redis.Redis | None = None) -> RedisSlidingWindowRateLimiter:
    return RedisSlidingWindowRateLimiter(
        client or create_redis_client(),
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        prefix=settings.rate_limit_prefix,
    )
