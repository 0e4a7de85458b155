from api_resources.models.base import BaseApiModel
from api_resources.models.pagination import Page

__all__ = ["BaseApiModel", "Page"]
