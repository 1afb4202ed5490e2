"""In-memory rate limiter for quiz submissions."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict, deque


class InMemoryRateLimiter:
    """Sliding-window limiter per key.

    At most `max_keys` client identities are tracked; when a new key
    arrives at capacity the least recently seen one is evicted.
    """

    def __init__(self, max_keys: int = 10000):
        self.max_keys = max(1, max_keys)
        self._hits: OrderedDict[str, deque] = OrderedDict()
        self._lock = threading.Lock()

    def allow(self, key: str, max_requests: int, window_seconds: int) -> tuple[bool, int]:
        now = time.monotonic()
        retry_after = 0
        with self._lock:
            q = self._hits.get(key)
            if q is None:
                while len(self._hits) >= self.max_keys:
                    self._hits.popitem(last=False)
                q = self._hits[key] = deque()
            else:
                self._hits.move_to_end(key)
            cutoff = now - window_seconds
            while q and q[0] < cutoff:
                q.popleft()
            if len(q) >= max_requests:
                retry_after = max(1, int(window_seconds - (now - q[0])))
                return False, retry_after
            q.append(now)
        return True, retry_after

    def __len__(self) -> int:
        return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
