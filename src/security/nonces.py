import logging
import threading
from typing import Callable, Optional
from src.utils.cache import KeyValueStore, InMemoryStore, now_ms

logger = logging.getLogger(__name__)

NONCE_PREFIX = "nonce:"
DEFAULT_RETENTION_MS = 60 * 60 * 1000


class ClaimNonceRegistry:
    """Issues claim nonces that are unique among all retained records.

    Candidates start at the current time in milliseconds and probe upward
    until the store accepts a set-if-absent write. Records expire after the
    retention window, which bounds memory. Uniqueness across processes holds
    only when every process shares the same store.
    """

    def __init__(self, store: Optional[KeyValueStore] = None,
                 retention_ms: int = DEFAULT_RETENTION_MS,
                 clock: Optional[Callable[[], int]] = None):
        self.clock = clock or now_ms
        self.store = store if store is not None else InMemoryStore(clock=self.clock)
        self.retention_ms = retention_ms
        self._last_issued = 0
        self._lock = threading.Lock()

    def _key(self, nonce: int) -> str:
        return f"{NONCE_PREFIX}{nonce}"

    def generate(self) -> int:
        with self._lock:
            self.prune()

            issued_at = self.clock()
            candidate = max(issued_at, self._last_issued + 1)
            while not self.store.add(self._key(candidate), issued_at, ttl_ms=self.retention_ms):
                candidate += 1

            self._last_issued = candidate
            return candidate

    def contains(self, nonce: int) -> bool:
        return self.store.get(self._key(nonce)) is not None

    def prune(self) -> int:
        """Drop records older than the retention window"""
        removed = self.store.purge_expired()
        if removed:
            logger.debug(f"Pruned {removed} expired store entries")
        return removed

    def __len__(self):
        return len(self.store.keys(NONCE_PREFIX))
