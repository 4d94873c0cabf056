import hashlib
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

Compute = Callable[[], Awaitable[Any]]


@dataclass
class CacheResult:
    value: Any
    hit: bool
    age_seconds: Optional[int]


MISS = CacheResult(value=None, hit=False, age_seconds=None)


class BaseCache:
    """
    Get-or-compute contract shared by the cache backends.

    Subclasses provide ``get_json`` / ``set_json``; ``remember`` never stores
    a ``None`` result, so failed lookups are recomputed on the next call.
    """

    async def get_json(self, key: str) -> CacheResult:
        raise NotImplementedError

    async def set_json(self, key: str, payload: Any, ttl_seconds: int) -> None:
        raise NotImplementedError

    async def remember(self, key: str, ttl_seconds: int, compute: Compute) -> Any:
        cached = await self.get_json(key)
        if cached.hit:
            logger.debug("cache hit %s (age=%ss)", key, cached.age_seconds)
            return cached.value

        logger.debug("cache miss %s", key)
        value = await compute()
        if value is not None:
            await self.set_json(key, value, ttl_seconds=ttl_seconds)
        return value


class RedisCache(BaseCache):
    """
    Stores JSON payload + metadata:
      key -> {"stored_at": <unix>, "payload": {...}}
    """

    def __init__(self, redis_url: str):
        self.client = aioredis.from_url(redis_url, decode_responses=True)

    async def get_json(self, key: str) -> CacheResult:
        raw = await self.client.get(key)
        if not raw:
            return MISS

        try:
            obj = json.loads(raw)
            stored_at = int(obj.get("stored_at", 0))
            payload = obj["payload"]
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.warning("discarding unreadable cache entry %s", key)
            return MISS

        age = max(0, int(time.time()) - stored_at)
        return CacheResult(value=payload, hit=True, age_seconds=age)

    async def set_json(self, key: str, payload: Any, ttl_seconds: int) -> None:
        obj = {"stored_at": int(time.time()), "payload": payload}
        await self.client.setex(key, ttl_seconds, json.dumps(obj))


class MemoryCache(BaseCache):
    """Process-local store with the same envelope and expiry semantics."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[float, float, Any]] = {}

    async def get_json(self, key: str) -> CacheResult:
        entry = self._entries.get(key)
        if entry is None:
            return MISS

        stored_at, expires_at, payload = entry
        now = self._clock()
        if now >= expires_at:
            del self._entries[key]
            return MISS
        return CacheResult(value=payload, hit=True, age_seconds=int(now - stored_at))

    async def set_json(self, key: str, payload: Any, ttl_seconds: int) -> None:
        now = self._clock()
        self._entries[key] = (now, now + ttl_seconds, payload)


def rounded_coords(lat: float, lon: float, decimals: int) -> Tuple[str, str]:
    return (_format_coord(lat, decimals), _format_coord(lon, decimals))


def _format_coord(value: float, decimals: int) -> str:
    # + 0.0 folds -0.0 into 0.0
    return f"{round(float(value), decimals) + 0.0:.{decimals}f}"


def query_digest(query: str) -> str:
    return hashlib.md5(query.encode("utf-8")).hexdigest()


def make_cache(backend: str, redis_url: str) -> BaseCache:
    if backend == "memory":
        return MemoryCache()
    return RedisCache(redis_url)
