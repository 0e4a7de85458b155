"""api_resources - admin resources backed by a remote HTTP API."""

from api_resources.models import BaseApiModel, Page
from api_resources.services import (
    ApiError,
    ApiService,
    InvalidDataError,
    RequestResult,
    ServiceError,
    TransportError,
    get_api_service,
)
from api_resources.settings import Settings
from api_resources.utils import data_get

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "ApiService",
    "BaseApiModel",
    "InvalidDataError",
    "Page",
    "RequestResult",
    "ServiceError",
    "Settings",
    "TransportError",
    "data_get",
    "get_api_service",
]
