"""
Request compilation - endpoint + query string, with pagination parameters.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

DEFAULT_PER_PAGE = 15


@dataclass(frozen=True)
class CompiledRequest:
    """An endpoint with its serialized query string."""

    endpoint: str
    query: str = ""

    @property
    def target(self) -> str:
        """Path and query as sent to the API (and hashed for the cache key)."""
        if self.query:
            return f"{self.endpoint}?{self.query}"
        return self.endpoint

    def __str__(self) -> str:
        return self.target


def _flatten(prefix: str, value: Any) -> list[tuple[str, str]]:
    """Flatten nested mappings/lists into bracketed form pairs."""
    if value is None:
        return []
    if isinstance(value, bool):
        return [(prefix, "1" if value else "0")]
    if isinstance(value, Mapping):
        pairs = []
        for key, item in value.items():
            pairs.extend(_flatten(f"{prefix}[{key}]", item))
        return pairs
    if isinstance(value, (list, tuple)):
        pairs = []
        for index, item in enumerate(value):
            pairs.extend(_flatten(f"{prefix}[{index}]", item))
        return pairs
    return [(prefix, str(value))]


def build_query(params: Mapping[str, Any]) -> str:
    """
    Serialize params with form URL-encoding.

    Booleans become 1/0, None values are dropped, nested structures use
    ``key[sub]=value`` notation.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        pairs.extend(_flatten(str(key), value))
    return urlencode(pairs)


def compile_request(
    endpoint: str,
    params: Mapping[str, Any] | None = None,
    current_page: int | None = None,
    per_page: int | None = None,
    *,
    page_param: str = "page",
    per_page_param: str = "per_page",
) -> CompiledRequest:
    """
    Compile an endpoint and its parameters into a request target.

    Args:
        endpoint: API path, e.g. ``/users``
        params: Query parameters (not modified)
        current_page: Page number; pagination params are only added when set
        per_page: Page size (defaults to 15 when paginating)
        page_param: Query name for the page number
        per_page_param: Query name for the page size

    Returns:
        CompiledRequest
    """
    query_params = dict(params or {})

    if current_page:
        query_params[page_param] = current_page
        query_params[per_page_param] = per_page or DEFAULT_PER_PAGE

    if not query_params:
        return CompiledRequest(endpoint)

    return CompiledRequest(endpoint, build_query(query_params))
