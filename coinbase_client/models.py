"""Response envelope, pagination and shared resource types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from .decoding import (
    PayloadError,
    TolerantEnum,
    read_datetime,
    read_float,
    read_int,
    read_opt_int,
    read_opt_str,
    read_str,
    read_str_map,
    read_tag,
    require_object,
)
from .errors import DecodeError
from .utils import to_float

T = TypeVar("T")

ENVELOPE_FIELDS = frozenset({"data", "pagination", "errors", "warnings"})


class Order(str, Enum):
    """Sort direction of a paginated listing."""

    ASC = "asc"
    DESC = "desc"


@dataclass(slots=True)
class Pagination:
    """Cursor pagination block, decoded from responses and sent with list calls.

    ``previous_ending_before`` and ``next_starting_after`` record what the
    server reported and are never sent back by :meth:`to_query`.
    """

    limit: int = 25
    order: Order = Order.DESC
    ending_before: Optional[str] = None
    starting_after: Optional[str] = None
    previous_ending_before: Optional[str] = None
    next_starting_after: Optional[str] = None
    previous_uri: Optional[str] = None
    next_uri: Optional[str] = None

    def to_query(self) -> List[Tuple[str, str]]:
        pairs = [("limit", str(self.limit)), ("order", self.order.value)]
        if self.ending_before is not None:
            pairs.append(("ending_before", self.ending_before))
        if self.starting_after is not None:
            pairs.append(("starting_after", self.starting_after))
        return pairs

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pagination":
        order_tag = read_str(data, "order", Order.DESC.value)
        try:
            order = Order(order_tag.lower())
        except ValueError as exc:
            raise PayloadError(f"Unsupported pagination order: {order_tag!r}") from exc
        return cls(
            limit=read_int(data, "limit", 25),
            order=order,
            ending_before=read_opt_str(data, "ending_before"),
            starting_after=read_opt_str(data, "starting_after"),
            previous_ending_before=read_opt_str(data, "previous_ending_before"),
            next_starting_after=read_opt_str(data, "next_starting_after"),
            previous_uri=read_opt_str(data, "previous_uri"),
            next_uri=read_opt_str(data, "next_uri"),
        )


class ResourceType(TolerantEnum):
    """Kind of resource a record or reference points at."""

    ACCOUNT = "account"
    ADDRESS = "address"
    BUY = "buy"
    DEPOSIT = "deposit"
    NOTIFICATION = "notification"
    PAYMENT_METHOD = "payment_method"
    SELL = "sell"
    TRANSACTION = "transaction"
    USER = "user"
    WITHDRAWAL = "withdrawal"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class ResourceMeta:
    """Identity fields present on every resource record."""

    id: str = ""
    resource: ResourceType = ResourceType.UNKNOWN
    resource_path: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    raw_tags: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResourceMeta":
        raw_tags: Dict[str, str] = {}
        return cls(
            id=read_str(data, "id"),
            resource=read_tag(data, "resource", ResourceType, raw_tags),
            resource_path=read_str(data, "resource_path"),
            created_at=read_datetime(data, "created_at"),
            updated_at=read_datetime(data, "updated_at"),
            raw_tags=raw_tags,
        )


@dataclass(slots=True)
class ResourceRef:
    """Pointer to another resource embedded inside a record."""

    id: str = ""
    resource: ResourceType = ResourceType.UNKNOWN
    resource_path: str = ""
    raw_tags: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResourceRef":
        raw_tags: Dict[str, str] = {}
        return cls(
            id=read_str(data, "id"),
            resource=read_tag(data, "resource", ResourceType, raw_tags),
            resource_path=read_str(data, "resource_path"),
            raw_tags=raw_tags,
        )


@dataclass(slots=True)
class ErrorMessage:
    id: str = ""
    message: str = ""
    url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorMessage":
        return cls(read_str(data, "id"), read_str(data, "message"), read_opt_str(data, "url"))


@dataclass(slots=True)
class WarningMessage:
    id: str = ""
    message: str = ""
    url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WarningMessage":
        return cls(read_str(data, "id"), read_str(data, "message"), read_opt_str(data, "url"))


@dataclass(slots=True)
class Money:
    """Amount of a currency; ``amount`` may arrive as a number or a string."""

    amount: float = 0.0
    currency: str = ""
    base: Optional[str] = None
    scale: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Money":
        return cls(
            amount=read_float(data, "amount"),
            currency=read_str(data, "currency"),
            base=read_opt_str(data, "base"),
            scale=read_opt_int(data, "scale"),
        )


@dataclass(slots=True)
class Rates:
    currency: str = ""
    rates: Dict[str, str] = field(default_factory=dict)

    def rate(self, symbol: str) -> float:
        return to_float(self.rates[symbol])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rates":
        return cls(currency=read_str(data, "currency"), rates=read_str_map(data, "rates"))


@dataclass(slots=True)
class Time:
    iso: Optional[datetime] = None
    epoch: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Time":
        return cls(iso=read_datetime(data, "iso"), epoch=read_float(data, "epoch"))


@dataclass(slots=True)
class Currency:
    id: str = ""
    name: str = ""
    min_size: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Currency":
        return cls(
            id=read_str(data, "id"),
            name=read_str(data, "name"),
            min_size=read_float(data, "min_size"),
        )


@dataclass
class ResponseEnvelope(Generic[T]):
    """Uniform wrapper around every API response payload."""

    data: T
    pagination: Optional[Pagination] = None
    errors: List[ErrorMessage] = field(default_factory=list)
    warnings: List[WarningMessage] = field(default_factory=list)


@dataclass(frozen=True)
class Payload(Generic[T]):
    """Describes how to decode the ``data`` slot and what it defaults to."""

    parse: Callable[[Any], T]
    default: Callable[[], T]

    @classmethod
    def of(cls, model: Any) -> "Payload[Any]":
        return cls(lambda value: model.from_dict(require_object(value, "data")), model)

    @classmethod
    def list_of(cls, model: Any) -> "Payload[Any]":
        def parse(value: Any) -> List[Any]:
            if not isinstance(value, list):
                raise PayloadError(f"data must be a JSON array, got {type(value).__name__}")
            return [model.from_dict(require_object(item, "data item")) for item in value]

        return cls(parse, list)

    @classmethod
    def empty(cls) -> "Payload[Any]":
        return cls(lambda value: value, lambda: None)


def _messages(document: Dict[str, Any], key: str, model: Any) -> List[Any]:
    value = document.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise PayloadError(f"'{key}' must be a JSON array, got {type(value).__name__}")
    return [model.from_dict(require_object(item, f"'{key}' item")) for item in value]


def _envelope_from_dict(document: Any, payload: Payload[T]) -> ResponseEnvelope[T]:
    document = require_object(document, "Response")
    unexpected = sorted(set(document) - ENVELOPE_FIELDS)
    if unexpected:
        raise PayloadError(f"Unexpected envelope field(s): {', '.join(unexpected)}")
    data = document.get("data")
    pagination = document.get("pagination")
    return ResponseEnvelope(
        data=payload.default() if data is None else payload.parse(data),
        pagination=None
        if pagination is None
        else Pagination.from_dict(require_object(pagination, "'pagination'")),
        errors=_messages(document, "errors", ErrorMessage),
        warnings=_messages(document, "warnings", WarningMessage),
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def decode_envelope(raw: str, payload: Payload[T]) -> ResponseEnvelope[T]:
    """Decode ``raw`` response text into a :class:`ResponseEnvelope`."""

    try:
        document = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise DecodeError("Response body is not valid JSON", raw, exc) from exc
    try:
        return _envelope_from_dict(document, payload)
    except PayloadError as exc:
        raise DecodeError(f"Unexpected response payload: {exc}", raw, exc) from exc


__all__ = [
    "Currency",
    "ErrorMessage",
    "Money",
    "Order",
    "Pagination",
    "Payload",
    "Rates",
    "ResourceMeta",
    "ResourceRef",
    "ResourceType",
    "ResponseEnvelope",
    "Time",
    "WarningMessage",
    "decode_envelope",
]
