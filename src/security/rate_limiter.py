import math
import logging
from typing import Callable, Dict, Optional, Tuple
from src.utils.cache import KeyValueStore, InMemoryStore, now_ms
from src.utils.errors import RateLimitExceeded

logger = logging.getLogger(__name__)

# (max requests, window ms)
STRICT_RATE_LIMIT = (10, 60 * 1000)
DEFAULT_RATE_LIMIT = (100, 15 * 60 * 1000)
CLEANUP_INTERVAL_MS = 60 * 1000


class RateLimitResult:
    def __init__(self, allowed: bool, limit: int, remaining: int, reset_ms: int, now: int):
        self.allowed = allowed
        self.limit = limit
        self.remaining = remaining
        self.reset_ms = reset_ms
        self.reset = math.ceil(reset_ms / 1000)
        self.retry_after = max(0, math.ceil((reset_ms - now) / 1000))

    def headers(self) -> Dict[str, str]:
        return {
            'X-RateLimit-Limit': str(self.limit),
            'X-RateLimit-Remaining': str(self.remaining),
            'X-RateLimit-Reset': str(self.reset)
        }


class RateLimiter:
    """Fixed-window request counters keyed by scope and client"""

    def __init__(self, store: Optional[KeyValueStore] = None,
                 clock: Optional[Callable[[], int]] = None,
                 cleanup_interval_ms: int = CLEANUP_INTERVAL_MS):
        self.clock = clock or now_ms
        self.store = store if store is not None else InMemoryStore(clock=self.clock)
        self.cleanup_interval_ms = cleanup_interval_ms
        self._next_cleanup = 0

    def check(self, scope: str, client_id: str,
              rule: Tuple[int, int] = DEFAULT_RATE_LIMIT) -> RateLimitResult:
        max_requests, window_ms = rule
        self._purge_if_due()
        count, reset_ms = self.store.incr(f"ratelimit:{scope}:{client_id}", window_ms)
        now = self.clock()
        allowed = count <= max_requests
        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_id} on {scope} ({count}/{max_requests})")
        return RateLimitResult(allowed, max_requests, max(0, max_requests - count), reset_ms, now)

    def _purge_if_due(self) -> None:
        """Drop expired counters at most once per cleanup interval"""
        now = self.clock()
        if now < self._next_cleanup:
            return
        self._next_cleanup = now + self.cleanup_interval_ms
        removed = self.store.purge_expired()
        if removed:
            logger.debug(f"Purged {removed} expired rate limit entries")

    def enforce(self, scope: str, client_id: str,
                rule: Tuple[int, int] = DEFAULT_RATE_LIMIT) -> RateLimitResult:
        """Like check, but raises RateLimitExceeded on denial"""
        result = self.check(scope, client_id, rule)
        if not result.allowed:
            raise RateLimitExceeded(retry_after=result.retry_after, limit=result.limit,
                                    reset=result.reset)
        return result


def get_client_id(request) -> str:
    """First forwarded hop, then X-Real-IP, then the socket peer"""
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    real_ip = request.headers.get('X-Real-IP')
    if real_ip:
        return real_ip.strip()
    return request.remote_addr or 'unknown'
