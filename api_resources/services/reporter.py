"""
ErrorReporter - logs failed API calls and tells the user about them.
"""

import traceback
from collections.abc import Mapping
from typing import Any

from loguru import logger

from api_resources.services.errors import ApiError
from api_resources.services.notifications import (
    Notification,
    NotificationStatus,
    Notifier,
)

FAILURE_TITLES = {
    "GET": "Failed to fetch data",
    "POST": "Failed to create resource",
    "PATCH": "Failed to update resource",
    "PUT": "Failed to update resource",
    "DELETE": "Failed to delete resource",
}

REDACTED_HEADERS = {"authorization", "proxy-authorization", "cookie"}

# Syslog-style names that loguru has no level for
LEVEL_ALIASES = {
    "notice": "INFO",
    "alert": "CRITICAL",
    "emergency": "CRITICAL",
}


def _origin(exc: BaseException) -> tuple[str | None, int | None]:
    """File and line where the exception was raised."""
    if exc.__traceback__ is None:
        return None, None
    frame = traceback.extract_tb(exc.__traceback__)[-1]
    return frame.filename, frame.lineno


def _loguru_level(level: str) -> str:
    return LEVEL_ALIASES.get(level.lower(), level.upper())


def _redact(headers: Mapping[str, str]) -> dict[str, str]:
    return {
        name: "***" if name.lower() in REDACTED_HEADERS else value
        for name, value in headers.items()
    }


class ErrorReporter:
    """
    Reports a failed request.

    Logging is controlled by the ``enabled`` / ``include_*`` flags; the
    notification is always sent. ``report`` never raises.
    """

    def __init__(
        self,
        notifier: Notifier,
        enabled: bool = True,
        channel: str = "default",
        level: str = "error",
        include_request_data: bool = True,
        include_response_data: bool = False,
    ):
        self.notifier = notifier
        self.enabled = enabled
        self.channel = channel
        self.level = level
        self.include_request_data = include_request_data
        self.include_response_data = include_response_data

    def report(
        self,
        exc: Exception,
        method: str,
        url: str,
        request_data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        response_body: Any = None,
    ) -> None:
        """
        Log and notify about a failed request.

        Args:
            exc: The error raised by the transport
            method: HTTP method
            url: Full request URL
            request_data: Body sent with the request
            headers: Headers sent with the request (redacted before logging)
            response_body: Body captured at failure time, when not carried by exc
        """
        method = method.upper()

        try:
            self._log(exc, method, url, request_data, headers, response_body)
        except Exception as e:
            logger.warning(f"Could not log failed {method} {url}: {e}")

        try:
            self.notifier.send(
                Notification(
                    title=FAILURE_TITLES.get(method, "API request failed"),
                    body=str(exc),
                    status=NotificationStatus.DANGER,
                )
            )
        except Exception as e:
            logger.warning(f"Could not send failure notification: {e}")

    def build_log_data(
        self,
        exc: Exception,
        method: str,
        url: str,
        request_data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        response_body: Any = None,
    ) -> dict[str, Any]:
        file, line = _origin(exc)
        log_data: dict[str, Any] = {
            "method": method,
            "endpoint": url,
            "exception": {
                "type": type(exc).__name__,
                "message": str(exc),
                "code": getattr(exc, "code", 0),
                "file": file,
                "line": line,
            },
        }

        if self.include_request_data and request_data:
            log_data["request_data"] = dict(request_data)

        if headers:
            log_data["headers"] = _redact(headers)

        if self.include_response_data:
            if isinstance(exc, ApiError):
                log_data["raw_response_body"] = exc.raw_body
                log_data["status_code"] = exc.status_code
            elif response_body is not None:
                log_data["raw_response_body"] = response_body
            elif getattr(exc, "raw_body", None) is not None:
                log_data["raw_response_body"] = exc.raw_body

        return log_data

    def _log(
        self,
        exc: Exception,
        method: str,
        url: str,
        request_data: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
        response_body: Any,
    ) -> None:
        if not self.enabled:
            return

        log_data = self.build_log_data(
            exc, method, url, request_data, headers, response_body
        )
        logger.bind(channel=self.channel, api_request=log_data).log(
            _loguru_level(self.level), "API request failed"
        )
