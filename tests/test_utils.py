"""Tests for dot-notation data access."""

import pytest

from api_resources.utils import data_get

BODY = {
    "data": {
        "total": 2,
        "data": [
            {"id": 1, "tags": ["a"]},
            {"id": 2, "tags": []},
        ],
    }
}


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("data.total", 2),
        ("data.data.0.id", 1),
        ("data.data.*.id", [1, 2]),
        ("data.data.1.tags", []),
        (None, BODY),
        ("", BODY),
    ],
)
def test_data_get(path, expected) -> None:
    assert data_get(BODY, path) == expected


def test_missing_segment_returns_default() -> None:
    assert data_get(BODY, "data.meta.page", 1) == 1
    assert data_get(BODY, "data.data.5.id") is None
    assert data_get(BODY, "data.total.value", "x") == "x"


def test_wildcard_skips_items_without_the_key() -> None:
    rows = {"items": [{"id": 1}, {"name": "no id"}, {"id": 3}]}
    assert data_get(rows, "items.*.id") == [1, 3]


def test_wildcard_over_mapping_values() -> None:
    assert data_get({"a": {"n": 1}, "b": {"n": 2}}, "*.n") == [1, 2]


def test_strings_are_not_indexed() -> None:
    assert data_get({"name": "Ada"}, "name.0") is None
