from collections.abc import Mapping, Sequence
from typing import Any

_MISSING = object()


def _step(target: Any, segment: str) -> Any:
    """Go one level down into a mapping or list, or return _MISSING."""
    if isinstance(target, Mapping):
        return target.get(segment, _MISSING)
    if isinstance(target, Sequence) and not isinstance(target, (str, bytes)):
        try:
            return target[int(segment)]
        except (ValueError, IndexError):
            return _MISSING
    return _MISSING


def data_get(target: Any, path: str | None, default: Any = None) -> Any:
    """
    Read a value from nested mappings/lists using dot notation.

    ``data_get(body, "data.total")`` reads ``body["data"]["total"]``; numeric
    segments index lists and ``*`` collects a segment across every item.
    Returns ``default`` when any segment is missing.

    Examples:
        data_get({"data": {"total": 3}}, "data.total")           -> 3
        data_get({"data": [{"id": 1}, {"id": 2}]}, "data.*.id")  -> [1, 2]
        data_get({"data": []}, "data.0.id", default="none")      -> "none"
    """
    if path is None or path == "":
        return target

    segments = path.split(".")
    for index, segment in enumerate(segments):
        if segment == "*":
            if isinstance(target, Mapping):
                items = list(target.values())
            elif isinstance(target, Sequence) and not isinstance(target, (str, bytes)):
                items = list(target)
            else:
                return default

            rest = ".".join(segments[index + 1 :])
            if not rest:
                return items
            return [
                value
                for value in (data_get(item, rest, _MISSING) for item in items)
                if value is not _MISSING
            ]

        target = _step(target, segment)
        if target is _MISSING:
            return default

    return target
