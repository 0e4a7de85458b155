"""
Base model for resources stored behind a remote API.

Subclasses declare the endpoint and their fields; list/detail/create/update/
delete go through ApiService, so reads are cached and writes refresh the next
read.

    class User(BaseApiModel):
        endpoint: ClassVar[str] = "/users"

        id: int | None = None
        name: str = ""

    page = User.get_rows_paginated(current_page=2)
    user = User.get(42)
    user.update_record({"name": "Ada"})
"""

from collections.abc import Mapping
from typing import Any, ClassVar, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError

from api_resources.models.pagination import Page
from api_resources.services.client import ApiService, get_api_service
from api_resources.services.errors import InvalidDataError
from api_resources.settings import global_settings
from api_resources.utils import data_get

M = TypeVar("M", bound="BaseApiModel")


class BaseApiModel(BaseModel):
    """
    A resource backed by an API endpoint.

    Attributes the API returns beyond the declared fields are kept as extras.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    endpoint: ClassVar[str] = ""
    total_key: ClassVar[str] = global_settings.total_key
    results_key: ClassVar[str] = global_settings.results_key
    key_name: ClassVar[str] = "id"
    per_page: ClassVar[int] = 15
    cache_seconds: ClassVar[int | None] = 60
    api_service: ClassVar[ApiService | None] = None

    _exists: bool = PrivateAttr(default=False)
    _original: dict[str, Any] = PrivateAttr(default_factory=dict)

    # Service access

    @classmethod
    def get_api_service(cls) -> ApiService:
        return cls.api_service or get_api_service()

    @classmethod
    def fetch_resource(
        cls,
        params: Mapping[str, Any] | None = None,
        current_page: int | None = None,
        cache_seconds: int | None = None,
        force_cache_refresh: bool = False,
        per_page: int | None = None,
    ) -> Any:
        return cls.get_api_service().fetch(
            cls.endpoint,
            params=params,
            current_page=current_page,
            cache_seconds=cache_seconds,
            force_cache_refresh=force_cache_refresh,
            per_page=per_page,
        )

    # State

    @property
    def exists(self) -> bool:
        """Whether the resource is known to exist on the API."""
        return self._exists

    def get_key(self) -> Any:
        return getattr(self, self.key_name, None)

    def get_attributes(self) -> dict[str, Any]:
        return self.model_dump()

    def get_dirty(self) -> dict[str, Any]:
        """Attributes changed since the model was loaded or saved."""
        return {
            name: value
            for name, value in self.model_dump().items()
            if name not in self._original or self._original[name] != value
        }

    def fill(self, attributes: Mapping[str, Any]) -> "BaseApiModel":
        for name, value in attributes.items():
            setattr(self, name, value)
        return self

    def _sync_original(self) -> None:
        self._exists = True
        self._original = self.model_dump()

    # Reads

    @classmethod
    def make_instance(cls: type[M], data: Any) -> M:
        """Build a persisted instance from one API record."""
        if not isinstance(data, Mapping):
            raise InvalidDataError(
                f"Expected an object for {cls.__name__}, got {type(data).__name__}"
            )
        try:
            instance = cls.model_validate(dict(data))
        except ValidationError as e:
            raise InvalidDataError(f"Invalid {cls.__name__} data: {e}") from e
        instance._sync_original()
        return instance

    @classmethod
    def transform_data(cls: type[M], response: Any) -> list[M]:
        """Turn the results list of a response into model instances."""
        rows = data_get(response, cls.results_key, [])
        if not isinstance(rows, list):
            return []

        items = []
        for row in rows:
            try:
                items.append(cls.make_instance(row))
            except InvalidDataError as e:
                logger.warning(f"Skipping {cls.__name__} record: {e}")
        return items

    @classmethod
    def get_total_count(cls) -> int:
        response = cls.fetch_resource(cache_seconds=cls.cache_seconds)
        return int(data_get(response, cls.total_key, 0) or 0)

    @classmethod
    def get_all(cls, current_page: int = 1, per_page: int | None = None) -> Any:
        return cls.fetch_resource(
            current_page=current_page,
            cache_seconds=cls.cache_seconds,
            per_page=per_page,
        )

    @classmethod
    def get_rows_paginated(
        cls: type[M], current_page: int = 1, per_page: int | None = None
    ) -> Page[M]:
        """One page of records, for table views."""
        per_page = per_page or cls.per_page
        response = cls.get_all(current_page=current_page, per_page=per_page)
        items = cls.transform_data(response)
        total = data_get(response, cls.total_key, len(items))

        return Page(
            items=items,
            total=int(total or 0),
            per_page=per_page,
            current_page=current_page,
        )

    @classmethod
    def get(
        cls: type[M], key: int | str, force_cache_refresh: bool = False
    ) -> M | None:
        """
        Load a single record.

        Accepts either a single-resource response (``data`` is the record) or
        a paginated one (first item of ``data.data``). Returns None when the
        record is missing or malformed.
        """
        response = cls.fetch_resource(
            params={cls.key_name: key},
            cache_seconds=cls.cache_seconds,
            force_cache_refresh=force_cache_refresh,
        )
        data = data_get(response, "data")

        try:
            if isinstance(data, Mapping) and "data" not in data:
                return cls.make_instance(data)

            results = data_get(data, "data")
            if isinstance(results, list) and results:
                return cls.make_instance(results[0])
        except InvalidDataError as e:
            logger.warning(f"Could not load {cls.__name__} {key}: {e}")

        return None

    # Writes

    @classmethod
    def create(cls: type[M], attributes: Mapping[str, Any]) -> M | None:
        response = cls.get_api_service().post(cls.endpoint, dict(attributes))
        data = data_get(response, "data")
        if data is None:
            return None
        try:
            return cls.make_instance(data)
        except InvalidDataError as e:
            logger.warning(f"Created {cls.__name__} but could not read it back: {e}")
            return None

    def save(self) -> bool:
        """POST a new record, or PATCH the changed attributes of an existing one."""
        service = self.get_api_service()

        if self.exists:
            result = service.patch_result(
                f"{self.endpoint}/{self.get_key()}", self.get_dirty()
            )
        else:
            result = service.post_result(self.endpoint, self.get_attributes())

        if not result.ok:
            return False

        data = data_get(result.data, "data")
        if isinstance(data, Mapping):
            self.fill(data)
        self._sync_original()
        return True

    def update_record(self, attributes: Mapping[str, Any]) -> bool:
        self.fill(attributes)
        return self.save()

    def delete(self) -> bool:
        result = self.get_api_service().delete_result(
            f"{self.endpoint}/{self.get_key()}"
        )
        if result.ok:
            self._exists = False
        return result.ok

    # Snapshots (carry a model between requests without refetching it)

    def to_snapshot(self) -> dict[str, Any]:
        cls = type(self)
        return {
            "class": f"{cls.__module__}.{cls.__qualname__}",
            "id": self.get_key(),
            "data": self.get_attributes(),
        }

    @classmethod
    def from_snapshot(cls, value: Any) -> "BaseApiModel":
        """Rebuild a model from ``to_snapshot`` output."""
        if not isinstance(value, Mapping) or not isinstance(value.get("class"), str):
            raise InvalidDataError("Invalid snapshot data format")

        model_class = _resolve_model_class(cls, value["class"])
        data = value.get("data") or {}
        if not isinstance(data, Mapping):
            raise InvalidDataError("Snapshot data must be an object")

        return model_class.make_instance(data)


def _iter_model_classes(root: type[BaseApiModel]):
    for subclass in root.__subclasses__():
        yield subclass
        yield from _iter_model_classes(subclass)


def _resolve_model_class(caller: type[BaseApiModel], path: str) -> type[BaseApiModel]:
    """Find an already-defined model class by its dotted path; nothing is imported."""
    for model_class in (caller, *_iter_model_classes(BaseApiModel)):
        if f"{model_class.__module__}.{model_class.__qualname__}" == path:
            return model_class
    raise InvalidDataError(f"Unknown snapshot class {path!r}")
