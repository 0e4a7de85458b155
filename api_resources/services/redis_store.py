"""Redis storage for CacheManager, so cached responses outlive the process."""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any

from api_resources.services.cache import CacheEntry
from api_resources.services.errors import InvalidDataError


def _serialize_entry(entry: CacheEntry[Any]) -> str:
    """Serialize a cache entry to JSON."""
    return json.dumps(
        {
            "data": entry.data,
            "timestamp": entry.timestamp.isoformat(),
            "ttl": entry.ttl.total_seconds(),
            "target": entry.target,
        }
    )


def _deserialize_entry(raw: bytes | str) -> CacheEntry[Any]:
    """Deserialize JSON to a cache entry."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        obj = json.loads(raw)
        return CacheEntry(
            data=obj["data"],
            timestamp=datetime.fromisoformat(obj["timestamp"]),
            ttl=timedelta(seconds=obj["ttl"]),
            target=obj.get("target"),
        )
    except (ValueError, KeyError, TypeError) as e:
        raise InvalidDataError(f"Malformed cache entry: {e}") from e


class RedisCacheStore:
    """Sync Redis store. Keys are written as given (already prefixed)."""

    name = "redis"

    def __init__(self, client: Any, *, prefix: str = "filament_api_") -> None:
        self._client = client  # redis.Redis
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, prefix: str = "filament_api_") -> RedisCacheStore:
        import redis

        return cls(redis.Redis.from_url(url), prefix=prefix)

    def get(self, key: str) -> CacheEntry[Any] | None:
        """Get a cache entry by key. Undecodable entries are dropped."""
        raw = self._client.get(key)
        if raw is None:
            return None
        try:
            return _deserialize_entry(raw)
        except InvalidDataError:
            self._client.delete(key)
            return None

    def set(self, key: str, entry: CacheEntry[Any]) -> str | None:
        """Store a cache entry; Redis expires it with the entry's TTL."""
        self._client.set(
            key,
            _serialize_entry(entry),
            px=max(1, int(entry.ttl.total_seconds() * 1000)),
        )
        return None

    def delete(self, key: str) -> bool:
        return bool(self._client.delete(key))

    def keys(self) -> list[str]:
        """List cache keys under the prefix using SCAN."""
        found: list[str] = []
        cursor = 0
        pattern = f"{self._prefix}*"
        while True:
            cursor, keys = self._client.scan(cursor, match=pattern, count=100)
            found.extend(k.decode("utf-8") if isinstance(k, bytes) else k for k in keys)
            if cursor == 0:
                break
        return found

    def disconnect(self) -> None:
        """Close the Redis connection."""
        self._client.close()
