"""Dotted-path lookup over parsed JSON values and flow contexts."""
from typing import Any


class _NotFound:
    """Marker for a path that does not resolve. Never equal to JSON null."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<not found>"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()


def split_path(path: str) -> list[str]:
    """Split a dotted path into segments.

    Raises:
        ValueError: If the path is empty or has an empty segment
    """
    if not isinstance(path, str) or not path.strip():
        raise ValueError("path must be a non-empty string")
    segments = path.strip().split(".")
    if any(segment == "" for segment in segments):
        raise ValueError(f"malformed path '{path}'")
    return segments


def lookup_path(value: Any, path: str) -> Any:
    """
    Walk a dotted path through nested objects and arrays.

    Numeric segments index into arrays. Returns NOT_FOUND when a segment is
    missing or the walk reaches a scalar. A JSON null at the end of the path is
    returned as None.
    """
    current = value
    for segment in split_path(path):
        if isinstance(current, dict):
            if segment not in current:
                return NOT_FOUND
            current = current[segment]
        elif isinstance(current, list):
            if not segment.isdigit():
                return NOT_FOUND
            index = int(segment)
            if index >= len(current):
                return NOT_FOUND
            current = current[index]
        else:
            return NOT_FOUND
    return current
