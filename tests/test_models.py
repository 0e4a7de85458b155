"""Tests for BaseApiModel backed by a mocked API."""

import json
import sys
from typing import ClassVar

import httpx
import pytest
import respx

from api_resources.models import BaseApiModel, Page
from api_resources.services import ApiService, InvalidDataError


class User(BaseApiModel):
    endpoint: ClassVar[str] = "/users"

    id: int | None = None
    name: str = ""
    email: str | None = None


class Post(BaseApiModel):
    endpoint: ClassVar[str] = "/posts"
    cache_seconds: ClassVar[int | None] = None

    id: int | None = None
    title: str


def _page(rows: list[dict], total: int) -> dict:
    return {"data": {"total": total, "data": rows}}


@pytest.fixture(autouse=True)
def bind_service(service: ApiService):
    User.api_service = service
    Post.api_service = service
    yield
    User.api_service = None
    Post.api_service = None


class TestListing:
    def test_rows_paginated(self, api_mock: respx.MockRouter) -> None:
        route = api_mock.get(path="/users").mock(
            return_value=httpx.Response(
                200,
                json=_page([{"id": 16, "name": "Ada"}, {"id": 17, "name": "Bo"}], 32),
            )
        )

        page = User.get_rows_paginated(current_page=2)

        assert isinstance(page, Page)
        assert [u.name for u in page] == ["Ada", "Bo"]
        assert page.total == 32
        assert page.per_page == 15
        assert page.current_page == 2
        assert page.last_page == 3
        assert page.has_more_pages
        assert page.first_item == 16
        assert page.last_item == 17
        assert all(u.exists for u in page)

        params = route.calls.last.request.url.params
        assert params["page"] == "2"
        assert params["per_page"] == "15"

    def test_rows_are_cached(self, api_mock: respx.MockRouter) -> None:
        route = api_mock.get(path="/users").mock(
            return_value=httpx.Response(200, json=_page([{"id": 1}], 1))
        )
        User.get_rows_paginated()
        User.get_rows_paginated()
        assert route.call_count == 1

    def test_bad_rows_are_skipped(
        self, api_mock: respx.MockRouter, log_records: list[dict]
    ) -> None:
        api_mock.get(path="/posts").mock(
            return_value=httpx.Response(
                200, json=_page([{"id": 1, "title": "Hi"}, {"id": 2}, "junk"], 3)
            )
        )

        page = Post.get_rows_paginated()

        assert [p.title for p in page] == ["Hi"]
        assert page.total == 3
        assert any("Skipping Post record" in r["message"] for r in log_records)

    def test_failed_listing_is_empty(self, api_mock: respx.MockRouter) -> None:
        api_mock.get(path="/users").mock(return_value=httpx.Response(404))
        page = User.get_rows_paginated()
        assert len(page) == 0
        assert page.total == 0
        assert page.first_item is None

    def test_total_count(self, api_mock: respx.MockRouter) -> None:
        api_mock.get(path="/users").mock(
            return_value=httpx.Response(200, json=_page([], 42))
        )
        assert User.get_total_count() == 42

    def test_extra_attributes_are_kept(self, api_mock: respx.MockRouter) -> None:
        api_mock.get(path="/users").mock(
            return_value=httpx.Response(
                200, json=_page([{"id": 1, "name": "Ada", "role": "admin"}], 1)
            )
        )
        user = User.get_rows_paginated().items[0]
        assert user.role == "admin"


class TestGet:
    def test_single_resource_response(self, api_mock: respx.MockRouter) -> None:
        route = api_mock.get(path="/users").mock(
            return_value=httpx.Response(200, json={"data": {"id": 5, "name": "Ada"}})
        )

        user = User.get(5)

        assert user is not None
        assert user.id == 5
        assert user.exists
        assert route.calls.last.request.url.params["id"] == "5"

    def test_paginated_response_takes_first(self, api_mock: respx.MockRouter) -> None:
        api_mock.get(path="/users").mock(
            return_value=httpx.Response(200, json=_page([{"id": 5, "name": "Ada"}], 1))
        )
        assert User.get(5).name == "Ada"

    def test_missing_record(self, api_mock: respx.MockRouter) -> None:
        api_mock.get(path="/users").mock(
            return_value=httpx.Response(200, json=_page([], 0))
        )
        assert User.get(99) is None

    def test_force_cache_refresh(self, api_mock: respx.MockRouter) -> None:
        route = api_mock.get(path="/users").mock(
            return_value=httpx.Response(200, json={"data": {"id": 5}})
        )
        User.get(5)
        User.get(5, force_cache_refresh=True)
        assert route.call_count == 2


class TestWrites:
    def test_create(self, api_mock: respx.MockRouter) -> None:
        route = api_mock.post("/users").mock(
            return_value=httpx.Response(201, json={"data": {"id": 9, "name": "Ada"}})
        )

        user = User.create({"name": "Ada"})

        assert user.id == 9
        assert user.exists
        assert json.loads(route.calls.last.request.content) == {"name": "Ada"}

    def test_save_new_record_posts_all_attributes(
        self, api_mock: respx.MockRouter
    ) -> None:
        route = api_mock.post("/users").mock(
            return_value=httpx.Response(201, json={"data": {"id": 3}})
        )
        user = User(name="Ada")

        assert user.save() is True
        assert user.id == 3
        assert user.exists
        assert json.loads(route.calls.last.request.content) == {
            "id": None,
            "name": "Ada",
            "email": None,
        }

    def test_update_patches_dirty_attributes(self, api_mock: respx.MockRouter) -> None:
        route = api_mock.patch("/users/1").mock(
            return_value=httpx.Response(200, json={"data": {"id": 1}})
        )
        user = User.make_instance({"id": 1, "name": "Ada", "email": "a@x.dev"})

        assert user.update_record({"name": "Grace"}) is True
        assert json.loads(route.calls.last.request.content) == {"name": "Grace"}
        assert user.get_dirty() == {}

    def test_failed_save(self, api_mock: respx.MockRouter) -> None:
        api_mock.patch("/users/1").mock(
            return_value=httpx.Response(422, json={"message": "Invalid"})
        )
        user = User.make_instance({"id": 1, "name": "Ada"})
        user.name = "Grace"

        assert user.save() is False
        assert user.get_dirty() == {"name": "Grace"}

    def test_delete(self, api_mock: respx.MockRouter, service: ApiService) -> None:
        api_mock.delete("/users/1").mock(return_value=httpx.Response(204))
        user = User.make_instance({"id": 1})

        assert user.delete() is True
        assert not user.exists
        assert service.get_force_refresh_session() is True


class TestSnapshots:
    def test_round_trip(self) -> None:
        user = User.make_instance({"id": 1, "name": "Ada", "role": "admin"})

        snapshot = user.to_snapshot()
        assert snapshot["class"] == "tests.test_models.User"
        assert snapshot["id"] == 1

        restored = BaseApiModel.from_snapshot(snapshot)
        assert isinstance(restored, User)
        assert restored.name == "Ada"
        assert restored.role == "admin"
        assert restored.exists

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "User",
            {"data": {}},
            {"class": "tests.test_models.Missing", "data": {}},
            {"class": "json.JSONDecoder", "data": {}},
            {"class": "tests.test_models.User", "data": ["not", "a", "dict"]},
        ],
    )
    def test_invalid_snapshot(self, value: object) -> None:
        with pytest.raises(InvalidDataError):
            BaseApiModel.from_snapshot(value)

    def test_unknown_module_is_not_imported(self) -> None:
        assert "this" not in sys.modules
        with pytest.raises(InvalidDataError):
            BaseApiModel.from_snapshot({"class": "this.Model", "data": {}})
        assert "this" not in sys.modules

    def test_make_instance_rejects_non_mapping(self) -> None:
        with pytest.raises(InvalidDataError):
            User.make_instance([1, 2])
