"""
User-facing notifications raised by the service layer.

The UI layer drains a NotificationBag after each request and renders what it
finds; LogNotifier is for headless use (scripts, workers).
"""

import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from loguru import logger


class NotificationStatus(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class Notification:
    title: str
    body: str = ""
    status: NotificationStatus = NotificationStatus.DANGER


@runtime_checkable
class Notifier(Protocol):
    def send(self, notification: Notification) -> None: ...


class NotificationBag:
    """
    Collects notifications until the caller pulls them.

    Holds at most ``max_size`` notifications; older ones are dropped first.
    """

    def __init__(self, max_size: int = 100) -> None:
        self._pending: deque[Notification] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    def send(self, notification: Notification) -> None:
        with self._lock:
            self._pending.append(notification)

    def pull(self) -> list[Notification]:
        """Return pending notifications and empty the bag."""
        with self._lock:
            pending = list(self._pending)
            self._pending.clear()
            return pending

    def __len__(self) -> int:
        return len(self._pending)


_LOG_LEVELS = {
    NotificationStatus.SUCCESS: "SUCCESS",
    NotificationStatus.WARNING: "WARNING",
    NotificationStatus.DANGER: "ERROR",
}


class LogNotifier:
    def send(self, notification: Notification) -> None:
        logger.log(
            _LOG_LEVELS[notification.status],
            f"{notification.title}: {notification.body}",
        )
