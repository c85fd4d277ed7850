"""Tests for header assembly and the low level Coinbase API client."""

from __future__ import annotations

import hashlib
import http.client
import hmac
import json

import pytest

from coinbase_client.api_client import CoinbaseAPI, Method, RequestAssembler, RequestDescriptor, UrllibTransport
from coinbase_client.auth import Credential
from coinbase_client.config import APIConfig, Language
from coinbase_client.errors import AuthError, CoinbaseError, DecodeError, TransportError
from coinbase_client.models import Order, Pagination, Payload
from coinbase_client.wallet import Account, AccountType

AUTH_HEADERS = {"CB-ACCESS-KEY", "CB-ACCESS-SIGN", "CB-ACCESS-TIMESTAMP"}


class RecordingTransport:
    def __init__(self, payload, status: int = 200) -> None:
        self.payload = payload
        self.status = status
        self.calls = []

    def request(self, method, url, headers, data, timeout):  # type: ignore[override]
        self.calls.append({
            "method": method,
            "url": url,
            "headers": headers,
            "data": data,
            "timeout": timeout,
        })
        body = self.payload if isinstance(self.payload, str) else json.dumps(self.payload)
        return self.status, body


class TickingClock:
    def __init__(self, start: int) -> None:
        self.now = start

    def __call__(self) -> float:
        value = self.now
        self.now += 1
        return value


def fixed_clock() -> float:
    return 1609459200.7


def test_authenticated_headers_sign_canonical_message():
    assembler = RequestAssembler(credential=Credential("key", "secret"), clock=fixed_clock)
    request = RequestDescriptor(Method.GET, "/v2/exchange-rates", "currency=EUR")

    headers = assembler.headers(request)

    expected = hmac.new(
        b"secret", b"1609459200GET/v2/exchange-rates?currency=EUR", hashlib.sha256
    ).hexdigest()
    assert headers["CB-ACCESS-KEY"] == "key"
    assert headers["CB-ACCESS-SIGN"] == expected
    assert headers["CB-ACCESS-TIMESTAMP"] == "1609459200"


def test_fixed_protocol_headers_always_present():
    assembler = RequestAssembler(language=Language.PT_BR, version="2019-11-15")
    headers = assembler.headers(RequestDescriptor(Method.GET, "/v2/time"))

    assert headers["Accept"] == "application/json"
    assert headers["Content-Type"] == "application/json"
    assert headers["Accept-Language"] == "pt-br"
    assert headers["CB-VERSION"] == "2019-11-15"
    assert headers["User-Agent"].startswith("coinbase-client/")


@pytest.mark.parametrize("credential", [Credential(), Credential("key", ""), Credential("", "secret")])
def test_anonymous_mode_omits_auth_headers(credential):
    headers = RequestAssembler(credential=credential).headers(RequestDescriptor(Method.GET, "/v2/user"))
    assert AUTH_HEADERS.isdisjoint(headers)


def test_sensitive_headers_are_redacted():
    assembler = RequestAssembler(credential=Credential("my-key", "secret"), clock=fixed_clock)
    headers = assembler.headers(RequestDescriptor(Method.GET, "/v2/user"))

    redacted = headers.redacted()
    assert redacted["CB-ACCESS-KEY"] == "[REDACTED]"
    assert redacted["CB-ACCESS-SIGN"] == "[REDACTED]"
    assert redacted["CB-ACCESS-TIMESTAMP"] == "1609459200"
    assert "my-key" not in repr(headers)


def test_each_request_samples_a_fresh_timestamp():
    transport = RecordingTransport({"data": {"iso": "2021-01-01T00:00:00Z", "epoch": 1609459200}})
    api = CoinbaseAPI.private("key", "secret", transport=transport, clock=TickingClock(100))

    api.time()
    api.time()

    first, second = (call["headers"] for call in transport.calls)
    assert first["CB-ACCESS-TIMESTAMP"] == "100"
    assert second["CB-ACCESS-TIMESTAMP"] == "101"
    assert first["CB-ACCESS-SIGN"] != second["CB-ACCESS-SIGN"]


def test_invalid_header_value_fails_before_sending():
    transport = RecordingTransport({"data": {}})
    api = CoinbaseAPI.private("bad\nkey", "secret", transport=transport)

    with pytest.raises(AuthError):
        api.current_user()
    assert transport.calls == []


def test_unusable_secret_fails_before_sending():
    transport = RecordingTransport({"data": {}})
    api = CoinbaseAPI.private("key", "\ud800", transport=transport)

    with pytest.raises(AuthError):
        api.current_user()
    assert transport.calls == []


def test_non_utf8_bytes_body_fails_before_sending():
    transport = RecordingTransport({"data": {}})
    api = CoinbaseAPI.private("key", "secret", transport=transport)

    with pytest.raises(CoinbaseError):
        api.call(Method.POST, "/v2/accounts", Payload.empty(), body=b"\xff")
    assert transport.calls == []


def test_urllib_transport_wraps_protocol_errors(monkeypatch):
    def broken_urlopen(request, timeout):
        raise http.client.IncompleteRead(b"partial")

    monkeypatch.setattr("urllib.request.urlopen", broken_urlopen)

    with pytest.raises(TransportError):
        UrllibTransport().request("GET", "https://api.coinbase.com/v2/time", {}, None, 1.0)


def test_rates_request_url_and_decoding():
    transport = RecordingTransport({"data": {"currency": "EUR", "rates": {"BTC": "0.00002"}}})
    api = CoinbaseAPI(transport=transport)

    response = api.rates("EUR")

    call = transport.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.coinbase.com/v2/exchange-rates?currency=EUR"
    assert call["data"] is None
    assert AUTH_HEADERS.isdisjoint(call["headers"])
    assert response.data.currency == "EUR"
    assert response.data.rate("BTC") == pytest.approx(0.00002)


def test_post_body_is_signed_and_sent():
    transport = RecordingTransport({"data": {"id": "a1", "resource": "account", "type": "wallet"}})
    api = CoinbaseAPI.private("key", "secret", transport=transport, clock=fixed_clock)

    response = api.update_account("a1", "Savings")

    call = transport.calls[0]
    body = json.dumps({"name": "Savings"})
    expected = hmac.new(
        b"secret", f"1609459200PUT/v2/accounts/a1{body}".encode(), hashlib.sha256
    ).hexdigest()
    assert call["method"] == "PUT"
    assert call["data"] == body.encode()
    assert call["headers"]["CB-ACCESS-SIGN"] == expected
    assert isinstance(response.data, Account)
    assert response.data.kind is AccountType.WALLET


def test_list_endpoint_sends_pagination_query():
    transport = RecordingTransport(
        {
            "pagination": {
                "limit": 25,
                "order": "desc",
                "starting_after": None,
                "ending_before": None,
                "next_starting_after": "tx_9",
                "next_uri": "/v2/accounts?starting_after=tx_9",
            },
            "data": [{"id": "a1", "resource": "account"}, {"id": "a2", "resource": "account"}],
        }
    )
    api = CoinbaseAPI(transport=transport)

    response = api.list_accounts(Pagination(limit=10, order=Order.ASC, starting_after="a0"))

    assert transport.calls[0]["url"] == (
        "https://api.coinbase.com/v2/accounts?limit=10&order=asc&starting_after=a0"
    )
    assert [account.meta.id for account in response.data] == ["a1", "a2"]
    assert response.pagination is not None
    assert response.pagination.next_starting_after == "tx_9"


def test_delete_with_empty_body_decodes_to_defaults():
    transport = RecordingTransport("", status=204)
    api = CoinbaseAPI.private("key", "secret", transport=transport)

    response = api.delete_account("a1")

    assert transport.calls[0]["method"] == "DELETE"
    assert response.data is None
    assert response.errors == []


def test_http_error_raises_transport_error_with_body():
    body = json.dumps({"errors": [{"id": "authentication_error", "message": "invalid signature"}]})
    api = CoinbaseAPI.private("key", "secret", transport=RecordingTransport(body, status=401))

    with pytest.raises(TransportError) as excinfo:
        api.current_user()
    assert excinfo.value.status == 401
    assert "invalid signature" in excinfo.value.body


def test_invalid_json_raises_decode_error_with_raw_text():
    api = CoinbaseAPI(transport=RecordingTransport("<html>oops</html>"))

    with pytest.raises(DecodeError) as excinfo:
        api.time()
    assert excinfo.value.raw == "<html>oops</html>"


def test_call_accepts_lowercase_method_and_query_pairs():
    transport = RecordingTransport({"data": {"amount": "1.5", "currency": "USD"}})
    api = CoinbaseAPI(transport=transport)

    response = api.call("get", "/v2/prices/BTC-USD/spot", Payload.empty(), query=[("date", "2021-01-01")])

    assert transport.calls[0]["url"].endswith("/v2/prices/BTC-USD/spot?date=2021-01-01")
    assert response.data == {"amount": "1.5", "currency": "USD"}


def test_paths_outside_the_api_root_are_rejected():
    with pytest.raises(ValueError):
        RequestDescriptor(Method.GET, "/v1/user")


def test_from_config_uses_settings():
    config = APIConfig(api_key="k", api_secret="s", base_url="https://example.test", language=Language.FR)
    transport = RecordingTransport({"data": {}})
    api = CoinbaseAPI.from_config(config, transport=transport)

    api.current_user()

    call = transport.calls[0]
    assert call["url"] == "https://example.test/v2/user"
    assert call["headers"]["Accept-Language"] == "fr"
    assert call["headers"]["CB-ACCESS-KEY"] == "k"
