import time
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

import backoff
import redis

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class KeyValueStore:
    """Minimal key-value interface with per-key TTL.

    Nonce reservation and rate-limit counters only go through these calls,
    so a shared backend can replace the in-process one without touching
    the verification logic.
    """

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> None:
        raise NotImplementedError

    def add(self, key: str, value: Any, ttl_ms: Optional[int] = None) -> bool:
        """Set only if absent. Returns True when the key was created."""
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def incr(self, key: str, ttl_ms: int) -> Tuple[int, int]:
        """Atomically increment a counter, starting its TTL on creation.

        Returns (new value, expiry time in epoch ms).
        """
        raise NotImplementedError

    def keys(self, prefix: str = '') -> List[str]:
        raise NotImplementedError

    def purge_expired(self) -> int:
        return 0


class InMemoryStore(KeyValueStore):
    """Process-local store. Safe across threads, not across processes."""

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self.clock = clock or now_ms
        self._data: Dict[str, Tuple[Any, Optional[int]]] = {}
        self._lock = threading.Lock()

    def _expiry(self, ttl_ms: Optional[int]) -> Optional[int]:
        return self.clock() + ttl_ms if ttl_ms is not None else None

    def _live(self, key: str) -> Optional[Tuple[Any, Optional[int]]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at = entry[1]
        if expires_at is not None and self.clock() >= expires_at:
            del self._data[key]
            return None
        return entry

    def get(self, key):
        with self._lock:
            entry = self._live(key)
            return entry[0] if entry else None

    def set(self, key, value, ttl_ms=None):
        with self._lock:
            self._data[key] = (value, self._expiry(ttl_ms))

    def add(self, key, value, ttl_ms=None):
        with self._lock:
            if self._live(key) is not None:
                return False
            self._data[key] = (value, self._expiry(ttl_ms))
            return True

    def delete(self, key):
        with self._lock:
            self._data.pop(key, None)

    def incr(self, key, ttl_ms):
        with self._lock:
            entry = self._live(key)
            if entry is None:
                expires_at = self._expiry(ttl_ms)
                self._data[key] = (1, expires_at)
                return 1, expires_at
            value, expires_at = entry
            self._data[key] = (value + 1, expires_at)
            return value + 1, expires_at

    def keys(self, prefix=''):
        with self._lock:
            return [k for k in list(self._data) if k.startswith(prefix) and self._live(k)]

    def purge_expired(self):
        with self._lock:
            now = self.clock()
            expired = [k for k, (_, exp) in self._data.items() if exp is not None and now >= exp]
            for key in expired:
                del self._data[key]
            return len(expired)

    def __len__(self):
        return len(self.keys())


class RedisStore(KeyValueStore):
    """Shared store for multi-instance deployments. Expiry is left to Redis."""

    def __init__(self, url: Optional[str] = None, client: Optional[redis.Redis] = None,
                 clock: Optional[Callable[[], int]] = None):
        self.client = client or redis.Redis.from_url(url, decode_responses=True)
        self.clock = clock or now_ms
        self._ping()
        logger.info("Redis store connected")

    @backoff.on_exception(backoff.expo,
                          redis.exceptions.ConnectionError,
                          max_tries=3,
                          jitter=backoff.full_jitter,
                          max_time=10)
    def _ping(self):
        return self.client.ping()

    def get(self, key):
        return self.client.get(key)

    def set(self, key, value, ttl_ms=None):
        self.client.set(key, value, px=ttl_ms)

    def add(self, key, value, ttl_ms=None):
        return bool(self.client.set(key, value, nx=True, px=ttl_ms))

    def delete(self, key):
        self.client.delete(key)

    def incr(self, key, ttl_ms):
        pipe = self.client.pipeline()
        pipe.incr(key)
        pipe.pttl(key)
        count, ttl = pipe.execute()
        if count == 1 or ttl is None or ttl < 0:
            self.client.pexpire(key, ttl_ms)
            ttl = ttl_ms
        return int(count), self.clock() + int(ttl)

    def keys(self, prefix=''):
        return list(self.client.scan_iter(match=f"{prefix}*"))


def create_store(cfg, clock: Optional[Callable[[], int]] = None) -> KeyValueStore:
    """Build the state backend selected by STORE_BACKEND"""
    if cfg.STORE_BACKEND == 'redis':
        return RedisStore(url=cfg.REDIS_URL, clock=clock)
    return InMemoryStore(clock=clock)
