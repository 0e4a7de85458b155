"""
HttpTransport - blocking JSON-over-HTTP with per-attempt timeout and
fixed-delay retries.
"""

import json
import time
from collections.abc import Mapping
from typing import Any

import httpx
from loguru import logger

from api_resources.services.errors import (
    ApiError,
    InvalidDataError,
    RequestTimeoutError,
    TransportError,
)
from api_resources.services.headers import HeaderValue, merge_headers

METHODS = ("GET", "POST", "PATCH", "PUT", "DELETE")


def is_retryable_status(status_code: int) -> bool:
    """429 and 5xx responses are retried."""
    return status_code == 429 or status_code >= 500


def encode_body(data: Mapping[str, Any] | None) -> bytes | None:
    """JSON-encode a request body; empty bodies are not sent."""
    if not data:
        return None
    try:
        return json.dumps(dict(data)).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidDataError(f"Request body is not JSON serializable: {e}") from e


class HttpTransport:
    """
    Sends requests to ``base_url + endpoint``.

    Raises TransportError / RequestTimeoutError when no response is obtained
    or a header value cannot be produced, ApiError for non-2xx responses, and
    InvalidDataError when the request body cannot be encoded or a 2xx body is
    not JSON.

    Only transport errors, 429 and 5xx responses are retried; any other 4xx
    (a 404, a 422) fails on the first attempt. Every verb is retried the same
    way, so writes are at-least-once.
    """

    def __init__(
        self,
        base_url: str = "",
        default_headers: Mapping[str, HeaderValue] | None = None,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_delay: int = 100,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url
        self.default_headers: dict[str, HeaderValue] = dict(default_headers or {})
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay  # milliseconds
        self._client = client

    def _get_http_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(follow_redirects=True)
        return self._client

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def build_headers(self, headers: Mapping[str, str] | None = None) -> httpx.Headers:
        """Resolve the default headers once and apply per-call overrides."""
        try:
            return merge_headers(self.default_headers, headers)
        except Exception as e:
            raise TransportError(f"Could not build request headers: {e}") from e

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """
        Make a request, retrying up to ``retry_attempts`` times in total.

        Args:
            method: One of GET, POST, PATCH, PUT, DELETE
            endpoint: Compiled path (and query) appended to base_url
            data: JSON body for write requests
            headers: Per-call headers, override the defaults

        Returns:
            Decoded JSON body
        """
        resolved = self.build_headers(headers)
        return self.send(method, endpoint, data=data, headers=resolved)

    def send(
        self,
        method: str,
        endpoint: str,
        *,
        data: Mapping[str, Any] | None = None,
        headers: httpx.Headers | None = None,
    ) -> Any:
        """Like ``request``, with headers already resolved by ``build_headers``."""
        method = method.upper()
        if method not in METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        url = self.url_for(endpoint)
        content = encode_body(data)
        if headers is None:
            headers = self.build_headers()
        attempts = max(1, self.retry_attempts)

        for attempt in range(1, attempts + 1):
            try:
                return self._attempt(method, url, content, headers)
            except (TransportError, ApiError) as e:
                retryable = isinstance(e, TransportError) or is_retryable_status(
                    e.status_code
                )
                if not retryable or attempt == attempts:
                    raise
                logger.warning(
                    f"{method} {url} failed (attempt {attempt}/{attempts}): {e}"
                )
                time.sleep(self.retry_delay / 1000)

        raise AssertionError("unreachable")

    def _attempt(
        self,
        method: str,
        url: str,
        content: bytes | None,
        headers: httpx.Headers,
    ) -> Any:
        """Execute a single HTTP request."""
        client = self._get_http_client()

        try:
            response = client.request(
                method=method,
                url=url,
                headers=headers,
                content=content,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(url, self.timeout) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(str(e) or type(e).__name__) from e

        if not response.is_success:
            raise ApiError.from_response(response.status_code, response.text)

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise InvalidDataError(
                f"Response from {method} {url} is not valid JSON",
                raw_body=response.text,
            ) from e

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None
