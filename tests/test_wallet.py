"""Tests for decoding wallet resource records."""

from __future__ import annotations

import json

import pytest

from coinbase_client.errors import DecodeError
from coinbase_client.models import Payload, ResourceType, decode_envelope
from coinbase_client.wallet import (
    Account,
    AccountType,
    Buy,
    PaymentMethod,
    PaymentMethodType,
    Transaction,
    TransactionStatus,
    TransactionType,
    TransferStatus,
    User,
    Withdrawal,
)

ACCOUNT = {
    "id": "58542935-67b5-56e1-a3f9-42686e07fa40",
    "name": "My Vault",
    "primary": False,
    "type": "vault",
    "currency": {"code": "BTC", "name": "Bitcoin", "color": "#F7931A", "exponent": 8, "type": "crypto"},
    "balance": {"amount": "4.00000000", "currency": "BTC"},
    "created_at": "2015-01-31T20:49:02Z",
    "updated_at": "2015-01-31T20:49:02Z",
    "resource": "account",
    "resource_path": "/v2/accounts/58542935-67b5-56e1-a3f9-42686e07fa40",
}


def test_account_decodes_flattened_meta():
    account = Account.from_dict(ACCOUNT)

    assert account.meta.id == ACCOUNT["id"]
    assert account.meta.resource is ResourceType.ACCOUNT
    assert account.kind is AccountType.VAULT
    assert account.balance.amount == pytest.approx(4.0)
    assert account.currency.exponent == 8
    assert account.currency.kind == "crypto"


def test_unknown_account_type_is_kept_as_raw_tag():
    account = Account.from_dict(dict(ACCOUNT, type="multisig_vault"))

    assert account.kind is AccountType.UNKNOWN
    assert account.raw_tags == {"type": "multisig_vault"}


def test_transaction_with_future_status_and_type_still_decodes():
    raw = json.dumps(
        {
            "data": {
                "id": "57ffb4ae-0c59-5430-bcd3-3f98f797a66c",
                "type": "staking_reward",
                "status": "on_hold",
                "amount": {"amount": -0.00100000, "currency": "BTC"},
                "native_amount": {"amount": "-0.01", "currency": "USD"},
                "description": None,
                "details": {"title": "Sent bitcoin", "subtitle": "to User 2"},
                "to": {"resource": "email", "email": "user@example.com"},
                "from": {"id": "x", "resource": "user"},
                "resource": "transaction",
                "resource_path": "/v2/accounts/a/transactions/57ffb4ae",
            }
        }
    )

    tx = decode_envelope(raw, Payload.of(Transaction)).data

    assert tx.kind is TransactionType.UNKNOWN
    assert tx.status is TransactionStatus.UNKNOWN
    assert tx.raw_tags == {"type": "staking_reward", "status": "on_hold"}
    assert tx.amount.amount == pytest.approx(-0.001)
    assert tx.native_amount.amount == pytest.approx(-0.01)
    assert tx.details["title"] == "Sent bitcoin"
    assert tx.from_ == {"id": "x", "resource": "user"}


def test_transaction_known_tags():
    tx = Transaction.from_dict({"type": "fiat_deposit", "status": "waiting_for_clearing"})
    assert tx.kind is TransactionType.FIAT_DEPOSIT
    assert tx.status is TransactionStatus.WAITING_FOR_CLEARING


def test_payment_method_flags_and_type():
    method = PaymentMethod.from_dict(
        {
            "id": "pm",
            "type": "sepa_bank_account",
            "name": "Bank",
            "currency": "EUR",
            "allow_buy": True,
            "instant_sell": True,
            "resource": "payment_method",
        }
    )

    assert method.kind is PaymentMethodType.SEPA_BANK_ACCOUNT
    assert method.allow_buy and method.instant_sell
    assert not method.allow_withdraw


def test_buy_decodes_transfer_fields():
    buy = Buy.from_dict(
        {
            "id": "b1",
            "status": "created",
            "payment_method": {"id": "pm", "resource": "payment_method", "resource_path": "/v2/pm"},
            "transaction": {"id": "tx", "resource": "transaction", "resource_path": "/v2/tx"},
            "amount": {"amount": "10.0", "currency": "BTC"},
            "total": {"amount": 102.01, "currency": "USD"},
            "subtotal": {"amount": "101.00", "currency": "USD"},
            "fee": {"amount": "1.01", "currency": "USD"},
            "committed": True,
            "instant": False,
            "payout_at": "2015-02-18T16:54:00-08:00",
            "hold_days": 3,
            "resource": "buy",
        }
    )

    assert buy.status is TransferStatus.CREATED
    assert buy.payment_method.resource is ResourceType.PAYMENT_METHOD
    assert buy.total.amount == pytest.approx(102.01)
    assert buy.committed
    assert buy.hold_days == 3
    assert buy.payout_at is not None and buy.payout_at.utcoffset() is not None


def test_withdrawal_defaults_when_fields_are_missing():
    withdrawal = Withdrawal.from_dict({"id": "w1", "status": "completed"})
    assert withdrawal.status is TransferStatus.COMPLETED
    assert withdrawal.fee.amount == 0.0
    assert withdrawal.payout_at is None


def test_user_optional_fields():
    user = User.from_dict(
        {
            "id": "u1",
            "name": "User One",
            "avatar_url": "https://images.example/u1.png",
            "country": {"code": "DE", "name": "Germany", "is_in_europe": True},
            "resource": "user",
        }
    )

    assert user.name == "User One"
    assert user.username is None
    assert user.country is not None and user.country.is_in_europe


def test_wrong_field_type_is_a_decode_error():
    raw = json.dumps({"data": dict(ACCOUNT, primary="yes")})
    with pytest.raises(DecodeError):
        decode_envelope(raw, Payload.of(Account))
