"""
Usage counters on top of CacheStore.

    quota:{user_id}:{action}:{YYYY-MM}  -> monthly counter, expires at the
                                            start of the following month (UTC)
    ratelimit:{identifier}              -> fixed-window request counter
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import structlog

from ecoscore.domain.cache.models import RateLimitStatus
from ecoscore.infrastructure.cache.cache_store import CacheStore

logger = structlog.get_logger(__name__)

QUOTA_PREFIX = "quota:"
RATE_LIMIT_PREFIX = "ratelimit:"


def start_of_next_month(now: datetime) -> datetime:
    """
    First instant of the month after ``now``, in the same timezone.

    Example:
        >>> start_of_next_month(datetime(2024, 12, 15, tzinfo=timezone.utc))
        datetime.datetime(2025, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if now.month == 12:
        return now.replace(year=now.year + 1, month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return now.replace(month=now.month + 1, day=1, hour=0, minute=0, second=0, microsecond=0)


class QuotaTracker:
    """
    Monthly per-user quotas and fixed-window rate limiting.

    Both rely on the backend's atomic increment. A broken cache never
    blocks anyone: quotas read as 0 and rate limits allow the request.
    """

    def __init__(
        self,
        store: CacheStore,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self._clock = clock

    def _quota_key(self, user_id: str, action: str) -> str:
        month = self._clock().strftime("%Y-%m")
        return f"{QUOTA_PREFIX}{user_id}:{action}:{month}"

    async def increment_quota(self, user_id: str, action: str) -> int:
        """Count one use of ``action`` this month. Returns the new count, 0 on error."""
        key = self._quota_key(user_id, action)
        count = await self.store.increment(key)
        if count is None:
            return 0

        now = self._clock()
        seconds_left = int((start_of_next_month(now) - now).total_seconds())
        await self.store.expire(key, max(1, seconds_left))

        logger.debug("Quota incremented", user_id=user_id, action=action, count=count)
        return count

    async def get_quota(self, user_id: str, action: str) -> int:
        value = await self.store.get(self._quota_key(user_id, action))
        return value if isinstance(value, int) else 0

    async def check_rate_limit(
        self,
        identifier: str,
        max_requests: int = 100,
        window_seconds: int = 60,
    ) -> RateLimitStatus:
        """
        Count one request for ``identifier`` in the current window.

        The window starts with the first request and lasts
        ``window_seconds``; its expiry is set only on that first hit.
        """
        key = f"{RATE_LIMIT_PREFIX}{identifier}"
        current = await self.store.increment(key)
        now = self._clock()
        if current is None:
            logger.warning("Rate limit unavailable, allowing request", identifier=identifier)
            return RateLimitStatus(allowed=True, remaining=max_requests, reset_at=now)

        if current == 1:
            await self.store.expire(key, window_seconds)

        remaining_seconds = await self.store.ttl(key)
        if remaining_seconds < 0:
            # Window without expiry (first-hit expire lost): restart it
            await self.store.expire(key, window_seconds)
            remaining_seconds = window_seconds

        allowed = current <= max_requests
        if not allowed:
            logger.info("Rate limit exceeded", identifier=identifier, count=current)

        return RateLimitStatus(
            allowed=allowed,
            remaining=max(0, max_requests - current),
            reset_at=now + timedelta(seconds=remaining_seconds),
        )
