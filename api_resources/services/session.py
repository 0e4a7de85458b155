"""
Session capability - per-user state the service reads and writes, used for
the "refresh on next fetch" flag set by successful writes.
"""

import threading
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Session(Protocol):
    """Minimal session interface (web frameworks' sessions fit it with a shim)."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def put(self, key: str, value: Any) -> None: ...

    def forget(self, key: str) -> None: ...

    def pull(self, key: str, default: Any = None) -> Any:
        """Read a value and remove it."""
        ...


class MemorySession:
    """Dict-backed session, one per user/process."""

    def __init__(self, data: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(data or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def forget(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def pull(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.pop(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._data
