"""Field path resolution into nested records."""

from typing import Any

from .normalize import is_mapping, is_sequence

PATH_SEPARATOR = "."


class _Missing:
    """Marker for a field path that does not resolve to a value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Missing, ())


MISSING: Any = _Missing()


def split_path(path: str) -> list[str]:
    """Split a dotted field path into segments."""
    return path.split(PATH_SEPARATOR)


def resolve_path(record: Any, path: str) -> Any:
    """Resolve a dotted path against a record.

    Maps are descended by key. A segment of digits indexes into a
    sequence. Any segment that cannot be followed yields ``MISSING``;
    resolution never raises for a path the record does not have.

    Args:
        record: Record to walk
        path: Dotted field path such as ``"address.city"``

    Returns:
        The value at the path, or ``MISSING``
    """
    value = record
    for segment in split_path(path):
        value = _step(value, segment)
        if value is MISSING:
            return MISSING
    return value


def _step(value: Any, segment: str) -> Any:
    if is_mapping(value):
        return value[segment] if segment in value else MISSING

    if is_sequence(value) and segment.isascii() and segment.isdigit():
        index = int(segment)
        return value[index] if index < len(value) else MISSING

    return MISSING
