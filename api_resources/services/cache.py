"""
CacheManager - Read-through response cache with TTL and explicit invalidation.

Features:
- Stable cache keys: prefix + MD5 of the compiled request target
- TTL per entry, expired entries behave as absent
- Pluggable storage (in-process dict, or Redis via RedisCacheStore)
- Thread-safe operations
"""

import hashlib
import threading
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from loguru import logger

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with metadata."""

    data: T
    timestamp: datetime
    ttl: timedelta
    target: str | None = None  # compiled request the key was derived from

    def expires_at(self) -> datetime:
        return self.timestamp + self.ttl

    def is_expired(self, now: datetime) -> bool:
        """Check if entry is past its TTL."""
        return now > self.expires_at()


@dataclass
class CacheResult(Generic[T]):
    """Result from cache lookup."""

    data: T
    from_cache: str  # store name, 'memory' | 'redis'


@runtime_checkable
class CacheStore(Protocol):
    """Storage backend for cache entries."""

    name: str

    def get(self, key: str) -> CacheEntry[Any] | None: ...

    def set(self, key: str, entry: CacheEntry[Any]) -> str | None:
        """Store an entry, returning the key of an evicted entry if any."""
        ...

    def delete(self, key: str) -> bool: ...

    def keys(self) -> list[str]: ...


class MemoryCacheStore:
    """In-process store with optional oldest-first eviction."""

    name = "memory"

    def __init__(self, max_size: int | None = None):
        self._entries: OrderedDict[str, CacheEntry[Any]] = OrderedDict()
        self._max_size = max_size

    def get(self, key: str) -> CacheEntry[Any] | None:
        return self._entries.get(key)

    def set(self, key: str, entry: CacheEntry[Any]) -> str | None:
        self._entries[key] = entry
        self._entries.move_to_end(key)
        if self._max_size and len(self._entries) > self._max_size:
            evicted, _ = self._entries.popitem(last=False)
            return evicted
        return None

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class CacheManager:
    """
    Read-through cache manager.

    Usage:
        cache = CacheManager(prefix="filament_api_")

        key = cache.derive_key("/users?page=1&per_page=15")
        result = cache.get(key)
        if result:
            return result.data

        data = fetch_data()
        cache.set(key, data, ttl=timedelta(minutes=1))
    """

    def __init__(
        self,
        prefix: str = "filament_api_",
        store: CacheStore | None = None,
        default_ttl: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] = datetime.now,
        debug: bool = False,
    ):
        self._prefix = prefix
        self._store = store if store is not None else MemoryCacheStore()
        self._default_ttl = default_ttl
        self._clock = clock
        self._debug = debug
        self._lock = threading.Lock()
        self._stats = CacheStats()

    @property
    def prefix(self) -> str:
        return self._prefix

    def derive_key(self, target: str) -> str:
        """Generate a cache key from a compiled request target."""
        return f"{self._prefix}{hashlib.md5(target.encode()).hexdigest()}"

    def get(self, key: str) -> CacheResult[Any] | None:
        """
        Get value from cache.

        Returns CacheResult if found and unexpired, None otherwise.
        """
        with self._lock:
            entry = self._store.get(key)

            if entry is None:
                self._stats.misses += 1
                self._log(f"MISS: {key}")
                return None

            if entry.is_expired(self._clock()):
                self._store.delete(key)
                self._stats.misses += 1
                self._log(f"EXPIRED: {key}")
                return None

            self._stats.hits += 1
            self._log(f"HIT: {key}")
            return CacheResult(data=entry.data, from_cache=self._store.name)

    def set(
        self,
        key: str,
        data: Any,
        ttl: timedelta | float | None = None,
        target: str | None = None,
    ) -> None:
        """
        Set value in cache.

        Args:
            key: Cache key
            data: Data to cache
            ttl: Time to live, as timedelta or seconds (uses default if not specified)
            target: Compiled request target, matched by ``invalidate``
        """
        if ttl is None:
            ttl = self._default_ttl
        elif isinstance(ttl, (int, float)):
            ttl = timedelta(seconds=ttl)

        # Non-positive TTL means "do not keep"
        if ttl <= timedelta(0):
            self.delete(key)
            return

        entry = CacheEntry(data=data, timestamp=self._clock(), ttl=ttl, target=target)

        with self._lock:
            evicted = self._store.set(key, entry)
            if evicted is not None:
                self._stats.evictions += 1
                self._log(f"EVICT: {evicted}")
            self._log(f"SET: {key} (TTL: {ttl.total_seconds()}s)")

    def delete(self, key: str) -> bool:
        """Delete a specific key from cache."""
        with self._lock:
            deleted = self._store.delete(key)
            if deleted:
                self._log(f"DELETE: {key}")
            return deleted

    def invalidate(self, pattern: str) -> int:
        """
        Invalidate all entries whose key or request target contains a pattern.

        Keys are hashed, so ``invalidate("/users")`` matches through the target
        recorded by ``set``.

        Args:
            pattern: Substring to match

        Returns:
            Number of entries invalidated
        """
        with self._lock:
            keys_to_delete = [
                key
                for key in self._store.keys()
                if pattern in key or pattern in (self._target_of(key) or "")
            ]
            for key in keys_to_delete:
                self._store.delete(key)

            if keys_to_delete:
                self._log(
                    f"INVALIDATE: {len(keys_to_delete)} entries matching '{pattern}'"
                )

            return len(keys_to_delete)

    def clear(self) -> int:
        """Clear all cache entries. Returns count of removed entries."""
        with self._lock:
            keys = self._store.keys()
            for key in keys:
                self._store.delete(key)
            self._log(f"CLEAR: {len(keys)} entries removed")
            return len(keys)

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count of removed entries."""
        now = self._clock()
        with self._lock:
            expired_keys = []
            for key in self._store.keys():
                entry = self._store.get(key)
                if entry is not None and entry.is_expired(now):
                    expired_keys.append(key)
            for key in expired_keys:
                self._store.delete(key)

            if expired_keys:
                self._log(f"CLEANUP: {len(expired_keys)} expired entries removed")

            return len(expired_keys)

    def _target_of(self, key: str) -> str | None:
        entry = self._store.get(key)
        return entry.target if entry is not None else None

    def get_stats(self) -> "CacheStats":
        """Get cache statistics."""
        self._stats.size = len(self._store.keys())
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[CacheManager] {message}")


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "size": self.size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }
