"""Serialization utilities."""

from dataclasses import asdict
from datetime import datetime


def _to_jsonable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_jsonable(v) for v in value]
    return value


def serialize_dataclass(obj) -> dict:
    """Serialize a dataclass to dict, converting datetimes to ISO strings.

    Nested dataclasses, dicts and lists are converted recursively.
    """
    return _to_jsonable(asdict(obj))
