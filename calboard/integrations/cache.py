"""Response cache for the generation gateway.

The gateway depends only on the ResponseCache protocol (get, put-with-TTL),
so a bounded or external cache can replace the in-memory default without
touching callers.
"""

import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from calboard.models.constants import CACHE_KEY_PROMPT_CHARS


class ResponseCache(Protocol):
    """Capability required by the gateway."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        ...


def cache_key(prompt: str, expect_json: bool) -> str:
    """Composite key: response mode plus the leading prompt characters."""
    return f"{'j' if expect_json else 't'}:{prompt[:CACHE_KEY_PROMPT_CHARS]}"


class InMemoryResponseCache:
    """Expiring map with lazy expiry on read.

    Expired entries are only dropped when read, so the map can grow over a
    long-running process.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
