"""Simple in-memory TTL cache. No Redis needed.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
data may be fetched twice (once per worker). The cache still eliminates
repeated upstream calls within the same worker, and everything is lost on
restart.
"""

import time
from typing import Any, Callable


class TTLCache:
    def __init__(self, default_ttl: int = 900, clock: Callable[[], float] = time.monotonic):
        if default_ttl <= 0:
            raise ValueError(f"default_ttl must be positive, got {default_ttl}")
        self.default_ttl = default_ttl
        self._clock = clock
        self._store: dict[str, tuple[float, Any]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._store:
            expires_at, value = self._store[key]
            if self._clock() < expires_at:
                self._hits += 1
                return value
            del self._store[key]
        self._misses += 1
        return default

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl}")
        self._store[key] = (self._clock() + ttl, value)

    def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def flush_all(self) -> int:
        """Drop every entry regardless of expiry. Returns how many were dropped."""
        count = len(self._store)
        self._store.clear()
        return count

    def stats(self) -> dict[str, int]:
        return {"hits": self._hits, "misses": self._misses, "keys": len(self)}

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [k for k, (expires_at, _) in self._store.items() if now >= expires_at]:
            del self._store[key]

    def __contains__(self, key: str) -> bool:
        entry = self._store.get(key)
        return entry is not None and self._clock() < entry[0]

    def __len__(self) -> int:
        self._purge_expired()
        return len(self._store)
