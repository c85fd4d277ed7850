"""Field readers and tolerant enumerations used to decode API payloads.

Records are *open*: unknown keys are ignored and missing keys fall back to
defaults, so new server fields never break old clients. Enumerations are
open as well: an unrecognised tag decodes to ``UNKNOWN`` and the raw string
is kept on the record in ``raw_tags``. A value of the wrong JSON type is
still an error and raises :class:`PayloadError`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Type, TypeVar

from .utils import parse_datetime, to_float

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="TolerantEnum")
R = TypeVar("R")


class PayloadError(ValueError):
    """Raised when a payload value has an unexpected shape or type."""


class TolerantEnum(str, Enum):
    """String enumeration whose decoder maps unknown tags to ``UNKNOWN``.

    Subclasses must define an ``UNKNOWN`` member.
    """

    @classmethod
    def decode(cls: Type[E], raw: Any) -> E:
        if not isinstance(raw, str):
            raise PayloadError(f"{cls.__name__} tag must be a string, got {type(raw).__name__}")
        try:
            return cls(raw)
        except ValueError:
            logger.debug("Unrecognised %s tag %r", cls.__name__, raw)
            return cls["UNKNOWN"]  # type: ignore[return-value]


def require_object(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise PayloadError(f"{what} must be a JSON object, got {type(value).__name__}")
    return value


def read_str(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise PayloadError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


def read_opt_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    if data.get(key) is None:
        return None
    return read_str(data, key)


def read_bool(data: Mapping[str, Any], key: str, default: bool = False) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise PayloadError(f"Field '{key}' must be a boolean, got {type(value).__name__}")
    return value


def read_opt_bool(data: Mapping[str, Any], key: str) -> Optional[bool]:
    if data.get(key) is None:
        return None
    return read_bool(data, key)


def read_int(data: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise PayloadError(f"Field '{key}' must be a non-negative integer, got {value!r}")
    return value


def read_opt_int(data: Mapping[str, Any], key: str) -> Optional[int]:
    if data.get(key) is None:
        return None
    return read_int(data, key)


def read_float(data: Mapping[str, Any], key: str, default: float = 0.0) -> float:
    value = data.get(key)
    if value is None:
        return default
    try:
        return to_float(value)
    except ValueError as exc:
        raise PayloadError(f"Field '{key}': {exc}") from exc


def read_datetime(data: Mapping[str, Any], key: str) -> Optional[datetime]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise PayloadError(f"Field '{key}' must be an ISO-8601 string, got {type(value).__name__}")
    try:
        return parse_datetime(value)
    except ValueError as exc:
        raise PayloadError(f"Field '{key}' is not a valid timestamp: {value!r}") from exc


def read_str_map(data: Mapping[str, Any], key: str) -> Dict[str, str]:
    value = data.get(key)
    if value is None:
        return {}
    mapping = require_object(value, f"Field '{key}'")
    for name, item in mapping.items():
        if not isinstance(item, str):
            raise PayloadError(f"Field '{key}.{name}' must be a string, got {type(item).__name__}")
    return dict(mapping)


def read_value_map(data: Mapping[str, Any], key: str) -> Optional[Dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return None
    return dict(require_object(value, f"Field '{key}'"))


def read_str_list(data: Mapping[str, Any], key: str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise PayloadError(f"Field '{key}' must be a list of strings")
    return list(value)


def read_record(
    data: Mapping[str, Any], key: str, factory: Callable[[Dict[str, Any]], R]
) -> Optional[R]:
    value = data.get(key)
    if value is None:
        return None
    return factory(require_object(value, f"Field '{key}'"))


def read_tag(
    data: Mapping[str, Any],
    key: str,
    enum_cls: Type[E],
    raw_tags: MutableMapping[str, str],
) -> E:
    """Decode ``data[key]`` as ``enum_cls``, remembering unrecognised raw tags."""

    value = data.get(key)
    if value is None:
        return enum_cls["UNKNOWN"]  # type: ignore[return-value]
    member = enum_cls.decode(value)
    if member.name == "UNKNOWN" and value != member.value:
        raw_tags[key] = value
    return member


__all__ = [
    "PayloadError",
    "TolerantEnum",
    "read_bool",
    "read_datetime",
    "read_float",
    "read_int",
    "read_opt_bool",
    "read_opt_int",
    "read_opt_str",
    "read_record",
    "read_str",
    "read_str_list",
    "read_str_map",
    "read_tag",
    "read_value_map",
    "require_object",
]
