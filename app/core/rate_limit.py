"""Request and per-sender rate limiting."""
import logging

from fastapi import HTTPException
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

logger = logging.getLogger(__name__)

# Per-IP limits for the HTTP surface
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])


class KeyedRateLimiter:
    """Moving-window limiter keyed by an arbitrary identifier (e.g. sender id)."""

    def __init__(self, namespace: str, rate: str):
        self.namespace = namespace
        self.item = parse(rate)
        self.storage = MemoryStorage()
        self.strategy = MovingWindowRateLimiter(self.storage)

    def hit(self, key: str) -> bool:
        """Record one event for key. Returns False when the window is already full."""
        return self.strategy.hit(self.item, self.namespace, key)

    def check(self, key: str, detail: str = "Too many requests") -> None:
        if not self.hit(key):
            logger.info(f"Rate limit exceeded for {self.namespace}:{key}")
            raise HTTPException(status_code=429, detail=detail)

    def remaining(self, key: str) -> int:
        return self.strategy.get_window_stats(self.item, self.namespace, key).remaining

    def reset(self) -> None:
        """Drop every recorded window. Stale windows otherwise expire on their own."""
        self.storage.reset()


message_limiter = KeyedRateLimiter("messages", settings.message_rate_limit)
