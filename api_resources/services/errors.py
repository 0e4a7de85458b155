"""
Service layer exceptions.
"""

import json
from typing import Any


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, code: int = 0):
        self.code = code
        super().__init__(message)


class TransportError(ServiceError):
    """No HTTP response was obtained (connection refused, DNS, reset...)."""

    pass


class RequestTimeoutError(TransportError):
    """Request timed out."""

    def __init__(self, url: str, timeout: float):
        self.timeout = timeout
        super().__init__(f"Request to '{url}' timed out after {timeout}s")


class ApiError(ServiceError):
    """The API answered with a status outside the 2xx range."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        raw_body: str | None = None,
        response_data: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        self.raw_body = raw_body
        self.response_data = response_data or {}
        super().__init__(message, code=status_code)

    @classmethod
    def from_response(cls, status_code: int, raw_body: str) -> "ApiError":
        """Build an error from a failed response, using its message if any."""
        try:
            data = json.loads(raw_body) if raw_body else {}
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        message = (
            data.get("message")
            or data.get("error")
            or f"API request failed with status {status_code}"
        )
        return cls(str(message), status_code, raw_body, data)


class InvalidDataError(ServiceError):
    """Data handed to a deserialization step had an unexpected shape."""

    def __init__(self, message: str, raw_body: str | None = None):
        self.raw_body = raw_body
        super().__init__(message)
