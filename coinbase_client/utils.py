"""Utility helpers shared across client components."""

from __future__ import annotations

import math
import urllib.parse
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple, Union


def to_float(value: Any) -> float:
    """Convert a JSON number or numeric string to ``float``.

    Monetary amounts arrive as either representation. Booleans, empty strings,
    underscore-grouped digits, integers too large for a float and anything
    else that does not parse as a number raise :class:`ValueError`.

    Parameters
    ----------
    value:
        Decoded JSON value.
    """

    if isinstance(value, bool):
        raise ValueError(f"Expected a number or numeric string, got {value!r}")
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError as exc:
            raise ValueError("Number is too large for a float") from exc
    if isinstance(value, str):
        if "_" in value:
            raise ValueError(f"Expected a numeric string, got {value!r}")
        try:
            number = float(value.strip())
        except ValueError as exc:
            raise ValueError(f"Expected a numeric string, got {value!r}") from exc
        if math.isnan(number):
            raise ValueError(f"Expected a numeric string, got {value!r}")
        return number
    raise ValueError(f"Expected a number or numeric string, got {type(value).__name__}")


def parse_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp such as ``2015-01-31T20:49:02Z``."""

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def encode_query(query: Union[None, str, Iterable[Tuple[str, Any]]]) -> Optional[str]:
    """Normalise a query given as a string or ``(key, value)`` pairs."""

    if query is None:
        return None
    if isinstance(query, str):
        return query or None
    encoded = urllib.parse.urlencode([(key, str(value)) for key, value in query])
    return encoded or None


__all__ = ["encode_query", "parse_datetime", "to_float"]
