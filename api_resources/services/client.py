"""
ApiService - the API access layer resources call into.

Combines:
- Request compilation (endpoint + query + pagination)
- CacheManager for read-through caching of GET requests
- HttpTransport for timeouts and retries
- A session flag that makes the next fetch after a write skip the cache
- ErrorReporter so failures are logged and notified, never raised
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, TypeVar

import httpx
from loguru import logger

from api_resources.services.cache import CacheManager
from api_resources.services.compiler import compile_request
from api_resources.services.errors import ServiceError
from api_resources.services.headers import HeaderValue
from api_resources.services.notifications import NotificationBag, Notifier
from api_resources.services.reporter import ErrorReporter
from api_resources.services.session import MemorySession, Session
from api_resources.services.transport import HttpTransport
from api_resources.settings import Settings, global_settings

T = TypeVar("T")

FORCE_CACHE_REFRESH_SESSION_KEY = "filament_api_force_cache_refresh"


@dataclass
class RequestResult(Generic[T]):
    """Result from a service request."""

    data: T
    from_cache: str | None = None  # 'memory' | 'redis' | None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ApiService:
    """
    HTTP API access with caching, retries and failure reporting.

    Usage:
        api = ApiService()

        # Cached, paginated list
        users = api.fetch("/users", current_page=1, cache_seconds=60)

        # Writes flag the session, so the next fetch skips the cache once
        api.post("/users", {"name": "Ada"})
        users = api.fetch("/users", current_page=1, cache_seconds=60)

    ``fetch``/``post``/``patch``/``put``/``delete`` return ``{}`` on failure;
    the ``*_result`` variants return a RequestResult carrying the error.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        cache: CacheManager | None = None,
        session: Session | None = None,
        notifier: Notifier | None = None,
        http_client: httpx.Client | None = None,
        debug: bool = False,
    ):
        settings = settings or global_settings
        self._settings = settings
        self._debug = debug

        self.page_param = settings.page_param
        self.per_page_param = settings.per_page_param

        self.transport = HttpTransport(
            base_url=settings.base_url,
            default_headers=settings.default_headers(),
            timeout=settings.timeout,
            retry_attempts=settings.retry_attempts,
            retry_delay=settings.retry_delay,
            client=http_client,
        )
        self.cache = cache if cache is not None else self._make_cache(settings)
        self.session = session if session is not None else MemorySession()
        self.notifier = notifier if notifier is not None else NotificationBag()
        self.reporter = ErrorReporter(
            self.notifier,
            enabled=settings.logging_enabled,
            channel=settings.logging_channel,
            level=settings.logging_level,
            include_request_data=settings.logging_include_request_data,
            include_response_data=settings.logging_include_response_data,
        )

    def _make_cache(self, settings: Settings) -> CacheManager:
        store = None
        if settings.redis_url:
            from api_resources.services.redis_store import RedisCacheStore

            store = RedisCacheStore.from_url(
                settings.redis_url, prefix=settings.cache_prefix
            )
        return CacheManager(
            prefix=settings.cache_prefix,
            store=store,
            default_ttl=timedelta(seconds=settings.cache_ttl),
            debug=self._debug,
        )

    # Configuration setters

    def set_base_url(self, base_url: str) -> "ApiService":
        self.transport.base_url = base_url
        return self

    def set_default_headers(self, headers: Mapping[str, HeaderValue]) -> "ApiService":
        """Replace the default headers. Values may be strings or callables."""
        self.transport.default_headers = dict(headers)
        return self

    def add_default_header(self, name: str, value: HeaderValue) -> "ApiService":
        self.transport.default_headers[name] = value
        return self

    def set_timeout(self, timeout: float) -> "ApiService":
        self.transport.timeout = timeout
        return self

    def set_retry_attempts(self, attempts: int) -> "ApiService":
        self.transport.retry_attempts = attempts
        return self

    def set_retry_delay(self, delay: int) -> "ApiService":
        """Delay between attempts, in milliseconds."""
        self.transport.retry_delay = delay
        return self

    def get_headers(self, additional: Mapping[str, str] | None = None) -> httpx.Headers:
        return self.transport.build_headers(additional)

    # Session refresh flag

    def set_force_refresh_session(self, force_refresh: bool = True) -> "ApiService":
        self.session.put(FORCE_CACHE_REFRESH_SESSION_KEY, force_refresh)
        return self

    def get_force_refresh_session(self) -> bool:
        return bool(self.session.get(FORCE_CACHE_REFRESH_SESSION_KEY, False))

    def clear_force_refresh_session(self) -> "ApiService":
        self.session.forget(FORCE_CACHE_REFRESH_SESSION_KEY)
        return self

    def _consume_force_refresh_session(self) -> bool:
        return bool(self.session.pull(FORCE_CACHE_REFRESH_SESSION_KEY, False))

    # Request compilation

    def compile_endpoint(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        current_page: int | None = None,
        per_page: int | None = None,
    ) -> str:
        """Endpoint with query string, using the configured pagination names."""
        return compile_request(
            endpoint,
            params,
            current_page,
            per_page,
            page_param=self.page_param,
            per_page_param=self.per_page_param,
        ).target

    def get_request_key(self, endpoint: str) -> str:
        """Cache key for a compiled endpoint."""
        return self.cache.derive_key(endpoint)

    # Reads

    def fetch_result(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        current_page: int | None = None,
        cache_seconds: float | None = None,
        force_cache_refresh: bool = False,
        per_page: int | None = None,
    ) -> RequestResult[Any]:
        """
        Fetch data from the API, optionally caching the response.

        Args:
            endpoint: API path, e.g. ``/users``
            params: Query parameters
            current_page: Page number (adds pagination params when set)
            cache_seconds: TTL; None disables caching for this call
            force_cache_refresh: Drop any cached entry before reading
            per_page: Page size

        Returns:
            RequestResult with the decoded body ({} on failure)
        """
        endpoint = self.compile_endpoint(endpoint, params, current_page, per_page)
        request_key = self.get_request_key(endpoint)

        # A pending session flag is consumed here either way
        session_refresh = self._consume_force_refresh_session()

        if cache_seconds is None:
            return self._send("GET", endpoint)

        if session_refresh or force_cache_refresh:
            self.cache.delete(request_key)
            self._log(f"Forced refresh of {endpoint}")

        cached = self.cache.get(request_key)
        if cached is not None:
            return RequestResult(data=cached.data, from_cache=cached.from_cache)

        result = self._send("GET", endpoint)
        if result.ok:
            self.cache.set(request_key, result.data, cache_seconds, target=endpoint)
        return result

    def fetch(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        current_page: int | None = None,
        cache_seconds: float | None = None,
        force_cache_refresh: bool = False,
        per_page: int | None = None,
    ) -> Any:
        """Like fetch_result, returning only the decoded body."""
        return self.fetch_result(
            endpoint,
            params,
            current_page,
            cache_seconds,
            force_cache_refresh,
            per_page,
        ).data

    # Writes

    def post_result(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        force_refresh_on_next_fetch: bool = True,
    ) -> RequestResult[Any]:
        """Create a resource."""
        return self._write("POST", endpoint, data, headers, force_refresh_on_next_fetch)

    def patch_result(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        force_refresh_on_next_fetch: bool = True,
    ) -> RequestResult[Any]:
        """Update part of a resource."""
        return self._write(
            "PATCH", endpoint, data, headers, force_refresh_on_next_fetch
        )

    def put_result(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        force_refresh_on_next_fetch: bool = True,
    ) -> RequestResult[Any]:
        """Replace a resource."""
        return self._write("PUT", endpoint, data, headers, force_refresh_on_next_fetch)

    def delete_result(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        force_refresh_on_next_fetch: bool = True,
    ) -> RequestResult[Any]:
        """Delete a resource."""
        return self._write(
            "DELETE", endpoint, data, headers, force_refresh_on_next_fetch
        )

    def post(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        force_refresh_on_next_fetch: bool = True,
    ) -> Any:
        return self.post_result(
            endpoint, data, headers, force_refresh_on_next_fetch
        ).data

    def patch(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        force_refresh_on_next_fetch: bool = True,
    ) -> Any:
        return self.patch_result(
            endpoint, data, headers, force_refresh_on_next_fetch
        ).data

    def put(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        force_refresh_on_next_fetch: bool = True,
    ) -> Any:
        return self.put_result(
            endpoint, data, headers, force_refresh_on_next_fetch
        ).data

    def delete(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        force_refresh_on_next_fetch: bool = True,
    ) -> Any:
        return self.delete_result(
            endpoint, data, headers, force_refresh_on_next_fetch
        ).data

    def _write(
        self,
        method: str,
        endpoint: str,
        data: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
        force_refresh_on_next_fetch: bool,
    ) -> RequestResult[Any]:
        result = self._send(method, endpoint, data, headers)
        if result.ok and force_refresh_on_next_fetch:
            self.set_force_refresh_session(True)
        return result

    def _send(
        self,
        method: str,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RequestResult[Any]:
        """Run a request through the transport, reporting any failure."""
        resolved: httpx.Headers | None = None
        try:
            resolved = self.transport.build_headers(headers)
            body = self.transport.send(method, endpoint, data=data, headers=resolved)
        except ServiceError as e:
            self.reporter.report(
                e,
                method,
                self.transport.url_for(endpoint),
                data,
                resolved if headers else None,
                getattr(e, "raw_body", None),
            )
            return RequestResult(data={}, error=e)

        return RequestResult(data=body)

    # Cache maintenance

    def clear_cache(self, pattern: str | None = None) -> int:
        """Clear cache entries, optionally matching a pattern."""
        if pattern:
            return self.cache.invalidate(pattern)
        return self.cache.clear()

    def get_cache_stats(self) -> dict[str, Any]:
        return self.cache.get_stats().to_dict()

    def close(self) -> None:
        """Close the HTTP client."""
        self.transport.close()
        logger.debug("ApiService closed")

    def __enter__(self) -> "ApiService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _log(self, message: str) -> None:
        if self._debug:
            logger.debug(f"[ApiService] {message}")


# Global service instance
_global_service: ApiService | None = None


def get_api_service() -> ApiService:
    """Get the global API service instance."""
    global _global_service
    if _global_service is None:
        _global_service = ApiService()
    return _global_service


def set_api_service(service: ApiService | None) -> None:
    """Replace the global API service instance (None resets it)."""
    global _global_service
    _global_service = service


def close_api_service() -> None:
    """Close the global API service."""
    global _global_service
    if _global_service:
        _global_service.close()
        _global_service = None
