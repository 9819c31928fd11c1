"""Common utility functions."""

from typing import Any


def get_value(obj: Any, key: str, default: Any = None) -> Any:
    """Get value from dict or object attribute."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def first_present(obj: Any, keys: list[str]) -> Any:
    """Return the first truthy value found under any of `keys`."""
    for key in keys:
        value = get_value(obj, key)
        if value:
            return value
    return None
