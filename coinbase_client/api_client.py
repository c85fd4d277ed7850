"""HTTP client for interacting with the Coinbase v2 REST API."""

from __future__ import annotations

import http.client
import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set, Tuple, TypeVar, Union

from .auth import Clock, Credential, build_message, sign
from .config import DEFAULT_API_VERSION, DEFAULT_BASE_URL, APIConfig, Language
from .errors import AuthError, TransportError
from .models import (
    Currency,
    Money,
    Pagination,
    Payload,
    Rates,
    ResponseEnvelope,
    Time,
    decode_envelope,
)
from .utils import encode_query
from .version import __version__
from .wallet import (
    Account,
    Address,
    Buy,
    Deposit,
    Notification,
    PaymentMethod,
    Sell,
    Transaction,
    User,
    UserAuth,
    Withdrawal,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

API_ROOT = "/v2/"
USER_AGENT = f"coinbase-client/{__version__}"

HEADER_KEY = "CB-ACCESS-KEY"
HEADER_SIGN = "CB-ACCESS-SIGN"
HEADER_TIMESTAMP = "CB-ACCESS-TIMESTAMP"
HEADER_VERSION = "CB-VERSION"

Query = Union[None, str, Iterable[Tuple[str, Any]]]
Body = Union[None, str, bytes, Dict[str, Any], List[Any]]


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """A single outgoing call: verb, API path, encoded query and body."""

    method: Method
    path: str
    query: Optional[str] = None
    body: str = ""

    def __post_init__(self) -> None:
        if not self.path.startswith(API_ROOT):
            raise ValueError(f"API path must start with {API_ROOT!r}: {self.path!r}")

    def url(self, base_url: str) -> str:
        url = base_url.rstrip("/") + self.path
        if self.query:
            url = f"{url}?{self.query}"
        return url


class HeaderMap(dict):
    """Header dictionary that keeps sensitive values out of logs and reprs."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.sensitive: Set[str] = set()

    def set_sensitive(self, name: str, value: str) -> None:
        self[name] = value
        self.sensitive.add(name)

    def merge(self, other: "HeaderMap") -> None:
        self.update(other)
        self.sensitive.update(other.sensitive)

    def redacted(self) -> Dict[str, str]:
        return {
            name: ("[REDACTED]" if name in self.sensitive else value)
            for name, value in self.items()
        }

    def __repr__(self) -> str:
        return f"HeaderMap({self.redacted()!r})"


def _header_value(name: str, value: str) -> str:
    if any(not (ch == "\t" or " " <= ch <= "~") for ch in value):
        raise AuthError(f"Header {name} contains characters not allowed in HTTP headers")
    return value


@dataclass(slots=True)
class RequestAssembler:
    """Builds the protocol and authentication headers for each request."""

    credential: Credential = Credential()
    language: Language = Language.EN
    user_agent: str = USER_AGENT
    version: str = DEFAULT_API_VERSION
    clock: Clock = time.time

    def headers(self, request: RequestDescriptor) -> HeaderMap:
        headers = HeaderMap()
        headers["Accept"] = "application/json"
        headers["Accept-Language"] = _header_value("Accept-Language", self.language.value)
        headers["Content-Type"] = "application/json"
        headers["User-Agent"] = _header_value("User-Agent", self.user_agent)
        headers[HEADER_VERSION] = _header_value(HEADER_VERSION, self.version)
        if self.credential.is_authenticated:
            headers.merge(self.auth_headers(request))
        return headers

    def auth_headers(self, request: RequestDescriptor) -> HeaderMap:
        # Sampled per request, never cached.
        now = int(self.clock())
        message = build_message(now, request.method.value, request.path, request.query, request.body)
        signature = sign(self.credential.secret, message)
        headers = HeaderMap()
        headers.set_sensitive(HEADER_KEY, _header_value(HEADER_KEY, self.credential.key))
        headers.set_sensitive(HEADER_SIGN, _header_value(HEADER_SIGN, signature))
        headers[HEADER_TIMESTAMP] = str(now)
        return headers


class Transport(Protocol):
    """Protocol for pluggable HTTP transports."""

    def request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[bytes],
        timeout: float,
    ) -> Tuple[int, str]:
        """Perform an HTTP request and return a status code with the body text."""


class UrllibTransport:
    """Default transport implementation built on top of :mod:`urllib`."""

    def request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[bytes],
        timeout: float,
    ) -> Tuple[int, str]:
        request = urllib.request.Request(url=url, data=data, headers=headers, method=method)
        try:
            with urllib.request.urlopen(request, timeout=timeout) as response:
                return response.getcode(), response.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as exc:  # pragma: no cover - network failure path
            return exc.code, exc.read().decode("utf-8", errors="replace")
        except (OSError, http.client.HTTPException) as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc


def _path(*segments: str) -> str:
    return API_ROOT + "/".join(urllib.parse.quote(segment, safe="-_.~") for segment in segments)


def _encode_body(body: Body) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise AuthError("Request body is not valid UTF-8 and cannot be signed") from exc
    if isinstance(body, str):
        return body
    return json.dumps(body)


@dataclass(slots=True)
class CoinbaseAPI:
    """Thin wrapper around Coinbase's v2 REST endpoints.

    Without credentials only public endpoints work; no auth headers are sent.
    """

    credential: Credential = Credential()
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    language: Language = Language.EN
    version: str = DEFAULT_API_VERSION
    user_agent: str = USER_AGENT
    transport: Transport = UrllibTransport()
    clock: Clock = time.time
    assembler: RequestAssembler = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.assembler = RequestAssembler(
            credential=self.credential,
            language=self.language,
            user_agent=self.user_agent,
            version=self.version,
            clock=self.clock,
        )

    @classmethod
    def private(cls, key: str, secret: str, **kwargs: Any) -> "CoinbaseAPI":
        return cls(credential=Credential(key, secret), **kwargs)

    @classmethod
    def from_config(cls, config: APIConfig, **kwargs: Any) -> "CoinbaseAPI":
        return cls(
            credential=Credential(config.api_key, config.api_secret),
            base_url=config.base_url,
            timeout=config.timeout,
            language=config.language,
            version=config.version,
            **kwargs,
        )

    def call(
        self,
        method: Union[Method, str],
        path: str,
        payload: Payload[T],
        query: Query = None,
        body: Body = None,
    ) -> ResponseEnvelope[T]:
        """Sign and send one request, then decode the response envelope."""

        if not isinstance(method, Method):
            method = Method(method.upper())
        request = RequestDescriptor(method, path, encode_query(query), _encode_body(body))
        headers = self.assembler.headers(request)
        url = request.url(self.base_url)
        logger.debug("%s %s headers=%s", request.method.value, url, headers.redacted())
        status, text = self.transport.request(
            request.method.value,
            url,
            dict(headers),
            request.body.encode("utf-8") if request.body else None,
            self.timeout,
        )
        logger.debug("%s %s -> %s", request.method.value, url, status)
        if status >= 400:
            raise TransportError(f"HTTP error from Coinbase: {status}", status=status, body=text)
        return decode_envelope(text if text.strip() else "{}", payload)

    def _get(self, path: str, payload: Payload[T], query: Query = None) -> ResponseEnvelope[T]:
        return self.call(Method.GET, path, payload, query=query)

    def _list(
        self, path: str, model: Any, pagination: Optional[Pagination]
    ) -> ResponseEnvelope[List[Any]]:
        query = pagination.to_query() if pagination is not None else None
        return self.call(Method.GET, path, Payload.list_of(model), query=query)

    # ------------------------------------------------------------------
    # Public endpoints
    # ------------------------------------------------------------------
    def time(self) -> ResponseEnvelope[Time]:
        return self._get(_path("time"), Payload.of(Time))

    def currencies(self) -> ResponseEnvelope[List[Currency]]:
        return self.call(Method.GET, _path("currencies"), Payload.list_of(Currency))

    def rates(self, currency: Optional[str] = None) -> ResponseEnvelope[Rates]:
        return self._get(_path("exchange-rates"), Payload.of(Rates), [("currency", currency or "USD")])

    def buy_price(self, currency: str, other: str) -> ResponseEnvelope[Money]:
        return self._get(_path("prices", f"{currency}-{other}", "buy"), Payload.of(Money))

    def sell_price(self, currency: str, other: str) -> ResponseEnvelope[Money]:
        return self._get(_path("prices", f"{currency}-{other}", "sell"), Payload.of(Money))

    def spot_price(self, currency: str, other: str) -> ResponseEnvelope[Money]:
        return self._get(_path("prices", f"{currency}-{other}", "spot"), Payload.of(Money))

    def historic_spot_price(self, currency: str, other: str, date: str) -> ResponseEnvelope[Money]:
        return self._get(
            _path("prices", f"{currency}-{other}", "spot"), Payload.of(Money), [("date", date)]
        )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def list_notifications(
        self, pagination: Optional[Pagination] = None
    ) -> ResponseEnvelope[List[Notification]]:
        return self._list(_path("notifications"), Notification, pagination)

    def get_notification(self, notification: str) -> ResponseEnvelope[Notification]:
        return self._get(_path("notifications", notification), Payload.of(Notification))

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def get_user(self, user: str) -> ResponseEnvelope[User]:
        return self._get(_path("users", user), Payload.of(User))

    def current_user(self) -> ResponseEnvelope[User]:
        return self._get(_path("user"), Payload.of(User))

    def current_user_auth(self) -> ResponseEnvelope[UserAuth]:
        return self._get(_path("user", "auth"), Payload.of(UserAuth))

    def update_user(self, data: Dict[str, Any]) -> ResponseEnvelope[User]:
        return self.call(Method.PUT, _path("user"), Payload.of(User), body=data)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def list_accounts(self, pagination: Optional[Pagination] = None) -> ResponseEnvelope[List[Account]]:
        return self._list(_path("accounts"), Account, pagination)

    def get_account(self, account: str) -> ResponseEnvelope[Account]:
        return self._get(_path("accounts", account), Payload.of(Account))

    def update_account(self, account: str, name: str) -> ResponseEnvelope[Account]:
        return self.call(Method.PUT, _path("accounts", account), Payload.of(Account), body={"name": name})

    def delete_account(self, account: str) -> ResponseEnvelope[Any]:
        return self.call(Method.DELETE, _path("accounts", account), Payload.empty())

    def set_primary_account(self, account: str) -> ResponseEnvelope[Account]:
        return self.call(Method.POST, _path("accounts", account, "primary"), Payload.of(Account))

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------
    def list_addresses(
        self, account: str, pagination: Optional[Pagination] = None
    ) -> ResponseEnvelope[List[Address]]:
        return self._list(_path("accounts", account, "addresses"), Address, pagination)

    def get_address(self, account: str, address: str) -> ResponseEnvelope[Address]:
        return self._get(_path("accounts", account, "addresses", address), Payload.of(Address))

    def create_address(self, account: str, name: Optional[str] = None) -> ResponseEnvelope[Address]:
        body = {"name": name} if name is not None else None
        return self.call(
            Method.POST, _path("accounts", account, "addresses"), Payload.of(Address), body=body
        )

    def list_address_transactions(
        self, account: str, address: str, pagination: Optional[Pagination] = None
    ) -> ResponseEnvelope[List[Transaction]]:
        return self._list(
            _path("accounts", account, "addresses", address, "transactions"), Transaction, pagination
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    def list_transactions(
        self, account: str, pagination: Optional[Pagination] = None
    ) -> ResponseEnvelope[List[Transaction]]:
        return self._list(_path("accounts", account, "transactions"), Transaction, pagination)

    def get_transaction(self, account: str, transaction: str) -> ResponseEnvelope[Transaction]:
        return self._get(_path("accounts", account, "transactions", transaction), Payload.of(Transaction))

    def create_transaction(self, account: str, data: Dict[str, Any]) -> ResponseEnvelope[Transaction]:
        """Send, transfer or request money depending on ``data["type"]``."""

        return self.call(
            Method.POST, _path("accounts", account, "transactions"), Payload.of(Transaction), body=data
        )

    def complete_request(self, account: str, transaction: str) -> ResponseEnvelope[Any]:
        return self.call(
            Method.POST, _path("accounts", account, "transactions", transaction, "complete"), Payload.empty()
        )

    def resend_request(self, account: str, transaction: str) -> ResponseEnvelope[Any]:
        return self.call(
            Method.POST, _path("accounts", account, "transactions", transaction, "resend"), Payload.empty()
        )

    def cancel_request(self, account: str, transaction: str) -> ResponseEnvelope[Any]:
        return self.call(
            Method.DELETE, _path("accounts", account, "transactions", transaction), Payload.empty()
        )

    # ------------------------------------------------------------------
    # Buys, sells, deposits and withdrawals
    # ------------------------------------------------------------------
    def list_buys(self, account: str, pagination: Optional[Pagination] = None) -> ResponseEnvelope[List[Buy]]:
        return self._list(_path("accounts", account, "buys"), Buy, pagination)

    def get_buy(self, account: str, buy: str) -> ResponseEnvelope[Buy]:
        return self._get(_path("accounts", account, "buys", buy), Payload.of(Buy))

    def create_buy(self, account: str, data: Dict[str, Any]) -> ResponseEnvelope[Buy]:
        return self.call(Method.POST, _path("accounts", account, "buys"), Payload.of(Buy), body=data)

    def commit_buy(self, account: str, buy: str) -> ResponseEnvelope[Buy]:
        return self.call(Method.POST, _path("accounts", account, "buys", buy, "commit"), Payload.of(Buy))

    def list_sells(self, account: str, pagination: Optional[Pagination] = None) -> ResponseEnvelope[List[Sell]]:
        return self._list(_path("accounts", account, "sells"), Sell, pagination)

    def get_sell(self, account: str, sell: str) -> ResponseEnvelope[Sell]:
        return self._get(_path("accounts", account, "sells", sell), Payload.of(Sell))

    def create_sell(self, account: str, data: Dict[str, Any]) -> ResponseEnvelope[Sell]:
        return self.call(Method.POST, _path("accounts", account, "sells"), Payload.of(Sell), body=data)

    def commit_sell(self, account: str, sell: str) -> ResponseEnvelope[Sell]:
        return self.call(Method.POST, _path("accounts", account, "sells", sell, "commit"), Payload.of(Sell))

    def list_deposits(
        self, account: str, pagination: Optional[Pagination] = None
    ) -> ResponseEnvelope[List[Deposit]]:
        return self._list(_path("accounts", account, "deposits"), Deposit, pagination)

    def get_deposit(self, account: str, deposit: str) -> ResponseEnvelope[Deposit]:
        return self._get(_path("accounts", account, "deposits", deposit), Payload.of(Deposit))

    def create_deposit(self, account: str, data: Dict[str, Any]) -> ResponseEnvelope[Deposit]:
        return self.call(Method.POST, _path("accounts", account, "deposits"), Payload.of(Deposit), body=data)

    def commit_deposit(self, account: str, deposit: str) -> ResponseEnvelope[Deposit]:
        return self.call(
            Method.POST, _path("accounts", account, "deposits", deposit, "commit"), Payload.of(Deposit)
        )

    def list_withdrawals(
        self, account: str, pagination: Optional[Pagination] = None
    ) -> ResponseEnvelope[List[Withdrawal]]:
        return self._list(_path("accounts", account, "withdrawals"), Withdrawal, pagination)

    def get_withdrawal(self, account: str, withdrawal: str) -> ResponseEnvelope[Withdrawal]:
        return self._get(_path("accounts", account, "withdrawals", withdrawal), Payload.of(Withdrawal))

    def create_withdrawal(self, account: str, data: Dict[str, Any]) -> ResponseEnvelope[Withdrawal]:
        return self.call(
            Method.POST, _path("accounts", account, "withdrawals"), Payload.of(Withdrawal), body=data
        )

    def commit_withdrawal(self, account: str, withdrawal: str) -> ResponseEnvelope[Withdrawal]:
        return self.call(
            Method.POST, _path("accounts", account, "withdrawals", withdrawal, "commit"), Payload.of(Withdrawal)
        )

    # ------------------------------------------------------------------
    # Payment methods
    # ------------------------------------------------------------------
    def list_payment_methods(
        self, pagination: Optional[Pagination] = None
    ) -> ResponseEnvelope[List[PaymentMethod]]:
        return self._list(_path("payment-methods"), PaymentMethod, pagination)

    def get_payment_method(self, payment_method: str) -> ResponseEnvelope[PaymentMethod]:
        return self._get(_path("payment-methods", payment_method), Payload.of(PaymentMethod))


__all__ = [
    "CoinbaseAPI",
    "HeaderMap",
    "Method",
    "RequestAssembler",
    "RequestDescriptor",
    "Transport",
    "UrllibTransport",
    "USER_AGENT",
]
