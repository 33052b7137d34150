"""Key-value cache backends with TTL: Redis, or an in-process fallback."""
import time
from typing import Callable, Dict, Optional, Tuple

from redis.asyncio import Redis


class CacheBackend:
    name = "base"

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str, ttl: int) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError

    async def clear(self) -> None:
        raise NotImplementedError

    async def incr(self, key: str, window: int) -> int:
        """Increment a counter, starting a `window`-second expiry on first hit."""
        raise NotImplementedError


class RedisCache(CacheBackend):
    name = "redis"

    def __init__(self, client: Redis):
        self.client = client

    async def get(self, key: str) -> Optional[str]:
        value = await self.client.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        await self.client.set(key, value, ex=ttl)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def clear(self) -> None:
        await self.client.flushdb()

    async def incr(self, key: str, window: int) -> int:
        count = await self.client.incr(key)
        if count == 1:
            await self.client.expire(key, window)
        return int(count)


class MemoryCache(CacheBackend):
    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: Dict[str, Tuple[str, float]] = {}
        self._counters: Dict[str, Tuple[int, float]] = {}

    def _purge_expired(self) -> None:
        now = self._clock()
        for entries in (self._store, self._counters):
            expired = [k for k, (_, expires_at) in entries.items() if now >= expires_at]
            for k in expired:
                del entries[k]

    async def get(self, key: str) -> Optional[str]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._purge_expired()
        self._store[key] = (value, self._clock() + ttl)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)
        self._counters.pop(key, None)

    async def clear(self) -> None:
        self._store.clear()
        self._counters.clear()

    async def incr(self, key: str, window: int) -> int:
        now = self._clock()
        self._purge_expired()
        count, expires_at = self._counters.get(key, (0, now + window))
        if now >= expires_at:
            count, expires_at = 0, now + window
        count += 1
        self._counters[key] = (count, expires_at)
        return count
