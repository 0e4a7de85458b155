"""
Header providers - default header values that are either fixed or computed
on every request (rotating tokens, request ids...).
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol, Union, runtime_checkable

import httpx

BUILTIN_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


@runtime_checkable
class HeaderProvider(Protocol):
    def resolve(self) -> str: ...


@dataclass(frozen=True)
class StaticHeader:
    value: str

    def resolve(self) -> str:
        return self.value


@dataclass(frozen=True)
class ComputedHeader:
    """Calls ``producer`` each time the header is resolved."""

    producer: Callable[[], str]

    def resolve(self) -> str:
        return str(self.producer())


HeaderValue = Union[str, Callable[[], str], HeaderProvider]


def as_provider(value: HeaderValue) -> HeaderProvider:
    """Coerce a plain string or callable into a HeaderProvider."""
    if isinstance(value, (StaticHeader, ComputedHeader)):
        return value
    if isinstance(value, str):
        return StaticHeader(value)
    if isinstance(value, HeaderProvider):
        return value
    if callable(value):
        return ComputedHeader(value)
    return StaticHeader(str(value))


def merge_headers(
    defaults: Mapping[str, HeaderValue] | None = None,
    overrides: Mapping[str, str] | None = None,
) -> httpx.Headers:
    """
    Merge headers: built-ins < configured defaults < per-call overrides.

    Default values are resolved here, at call time. Names are
    case-insensitive, a later layer replaces an earlier one.
    """
    headers = httpx.Headers(BUILTIN_HEADERS)
    if defaults:
        headers.update(
            {name: as_provider(value).resolve() for name, value in defaults.items()}
        )
    if overrides:
        headers.update(dict(overrides))
    return headers
