"""
In-process TTL cache

Owned by the application instance (``app.state``), never a module global,
so each app (and each test) gets its own cache and can invalidate it.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple


class TTLCache:
    """
    Small async-aware key/value cache with per-entry expiry.

    Args:
        ttl_seconds: Lifetime of an entry
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._lock = asyncio.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = (self._clock() + self.ttl_seconds, value)

    async def get_or_load(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value, loading it once on a miss."""
        value = self.get(key)
        if value is not None:
            return value
        async with self._lock:
            # Another request may have filled it while we waited
            value = self.get(key)
            if value is None:
                value = await loader()
                self.set(key, value)
            return value

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one key, or everything when no key is given."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
