"""
Service layer - the API access core.

Provides:
- compile_request: endpoint + query string with pagination parameters
- CacheManager: read-through response cache (memory or Redis storage)
- HttpTransport: timeouts, fixed-delay retries, header merging
- ErrorReporter: structured failure logs and user notifications
- ApiService: fetch/post/patch/put/delete combining all of the above
"""

from api_resources.services.errors import (
    ServiceError,
    TransportError,
    RequestTimeoutError,
    ApiError,
    InvalidDataError,
)
from api_resources.services.compiler import CompiledRequest, compile_request
from api_resources.services.cache import (
    CacheManager,
    CacheEntry,
    CacheResult,
    CacheStore,
    MemoryCacheStore,
)
from api_resources.services.headers import (
    ComputedHeader,
    HeaderProvider,
    StaticHeader,
)
from api_resources.services.session import MemorySession, Session
from api_resources.services.notifications import (
    LogNotifier,
    Notification,
    NotificationBag,
    NotificationStatus,
    Notifier,
)
from api_resources.services.reporter import ErrorReporter
from api_resources.services.transport import HttpTransport
from api_resources.services.client import (
    ApiService,
    RequestResult,
    close_api_service,
    get_api_service,
    set_api_service,
)

__all__ = [
    # Errors
    "ServiceError",
    "TransportError",
    "RequestTimeoutError",
    "ApiError",
    "InvalidDataError",
    # Compiler
    "CompiledRequest",
    "compile_request",
    # Cache
    "CacheManager",
    "CacheEntry",
    "CacheResult",
    "CacheStore",
    "MemoryCacheStore",
    # Headers
    "ComputedHeader",
    "HeaderProvider",
    "StaticHeader",
    # Session
    "MemorySession",
    "Session",
    # Notifications
    "LogNotifier",
    "Notification",
    "NotificationBag",
    "NotificationStatus",
    "Notifier",
    "ErrorReporter",
    # Transport
    "HttpTransport",
    # Service
    "ApiService",
    "RequestResult",
    "close_api_service",
    "get_api_service",
    "set_api_service",
]
