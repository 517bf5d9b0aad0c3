"""Dotted key-path lookup over decoded JSON values."""
from typing import Any

_MISSING = object()


def split_key_path(key_path: str | None) -> list[str]:
    if not key_path:
        return []
    return key_path.split(".")


def join_key_path(*parts: str | None) -> str:
    return ".".join(p for p in parts if p)


def value_at(value: Any, key_path: str | None, default: Any = None) -> Any:
    """Walk ``key_path`` ("a.b.0.c") through nested dicts and lists.

    Numeric segments index lists. An empty path returns ``value`` itself.
    Returns ``default`` as soon as a segment does not match.
    """
    current = value
    for segment in split_key_path(key_path):
        if isinstance(current, dict):
            current = current.get(segment, _MISSING)
        elif isinstance(current, list) and segment.lstrip("-").isdigit():
            index = int(segment)
            current = current[index] if -len(current) <= index < len(current) else _MISSING
        else:
            current = _MISSING
        if current is _MISSING:
            return default
    return current
