"""
Warm-instance caches
Everything here lives as long as the serverless instance and is lost on a
cold start. Instances are built by the app factory and handed to the
services explicitly, never reached through module globals.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from models.vehicle import Vehicle


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WarmCache:
    """
    In-memory key/value cache with a freshness window.
    Expired entries are kept so callers can still ask for stale data.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], datetime] = None):
        self._cache: Dict[str, Tuple[Any, datetime]] = {}
        self._ttl = timedelta(seconds=ttl_seconds)
        self._lock = asyncio.Lock()
        self._clock = clock or utcnow

    def is_fresh(self, stored_at: datetime) -> bool:
        return self._clock() - stored_at < self._ttl

    async def get_entry(self, key: str) -> Optional[Tuple[Any, datetime]]:
        """(value, stored_at) regardless of age"""
        async with self._lock:
            return self._cache.get(key)

    async def get(self, key: str) -> Optional[Any]:
        """Cached value if not expired."""
        entry = await self.get_entry(key)
        if entry and self.is_fresh(entry[1]):
            return entry[0]
        return None

    async def get_stale(self, key: str) -> Optional[Any]:
        entry = await self.get_entry(key)
        return entry[0] if entry else None

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            self._cache[key] = (value, self._clock())


class ZoneCache:
    """
    Per-city list of zone ids known to hold cars, plus the last non-empty
    vehicle list per city and policy for the stale-over-empty fallback.

    Concurrent discoveries for the same city are not coordinated; the last
    one to finish wins.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], datetime] = None):
        self._zones = WarmCache(ttl_seconds, clock)
        self._results = WarmCache(ttl_seconds, clock)

    async def fresh_zones(self, city: str) -> Optional[List[int]]:
        zones = await self._zones.get(city)
        return list(zones) if zones else None

    async def remember_zones(self, city: str, zones: List[int]) -> None:
        if zones:
            await self._zones.set(city, sorted(set(zones)))

    async def remember_result(self, city: str, vehicles: List[Vehicle], policy: str = "strict") -> None:
        if vehicles:
            await self._results.set(f"{city}:{policy}", list(vehicles))

    async def fallback(self, city: str, policy: str = "strict") -> Optional[List[Vehicle]]:
        """Last non-empty result, however old"""
        return await self._results.get_stale(f"{city}:{policy}")