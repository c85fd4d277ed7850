"""Wallet resource records: accounts, addresses, transactions and transfers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .decoding import (
    TolerantEnum,
    read_bool,
    read_datetime,
    read_int,
    read_opt_bool,
    read_opt_int,
    read_opt_str,
    read_record,
    read_str,
    read_str_list,
    read_str_map,
    read_tag,
    read_value_map,
)
from .models import Money, ResourceMeta, ResourceRef


class AccountType(TolerantEnum):
    WALLET = "wallet"
    FIAT = "fiat"
    VAULT = "vault"
    UNKNOWN = "unknown"


class PaymentMethodType(TolerantEnum):
    ACH_BANK_ACCOUNT = "ach_bank_account"
    SEPA_BANK_ACCOUNT = "sepa_bank_account"
    IDEAL_BANK_ACCOUNT = "ideal_bank_account"
    FIAT_ACCOUNT = "fiat_account"
    BANK_WIRE = "bank_wire"
    CREDIT_CARD = "credit_card"
    SECURE3D_CARD = "secure3d_card"
    EFT_BANK_ACCOUNT = "eft_bank_account"
    INTERAC = "interac"
    UNKNOWN = "unknown"


class TransferStatus(TolerantEnum):
    """Lifecycle state of buys, sells, deposits and withdrawals."""

    CREATED = "created"
    COMPLETED = "completed"
    CANCELED = "canceled"
    UNKNOWN = "unknown"


class TransactionStatus(TolerantEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"
    CANCELED = "canceled"
    WAITING_FOR_SIGNATURE = "waiting_for_signature"
    WAITING_FOR_CLEARING = "waiting_for_clearing"
    UNKNOWN = "unknown"


class TransactionType(TolerantEnum):
    SEND = "send"
    REQUEST = "request"
    TRANSFER = "transfer"
    BUY = "buy"
    SELL = "sell"
    FIAT_DEPOSIT = "fiat_deposit"
    FIAT_WITHDRAWAL = "fiat_withdrawal"
    EXCHANGE_DEPOSIT = "exchange_deposit"
    EXCHANGE_WITHDRAWAL = "exchange_withdrawal"
    VAULT_WITHDRAWAL = "vault_withdrawal"
    UNKNOWN = "unknown"


def _money(data: Dict[str, Any], key: str) -> Money:
    return read_record(data, key, Money.from_dict) or Money()


def _ref(data: Dict[str, Any], key: str) -> ResourceRef:
    return read_record(data, key, ResourceRef.from_dict) or ResourceRef()


@dataclass(slots=True)
class AccountCurrency:
    kind: str = ""
    name: str = ""
    code: str = ""
    color: str = ""
    exponent: int = 0
    sort_index: int = 0
    address_regex: str = ""
    asset_id: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccountCurrency":
        return cls(
            kind=read_str(data, "type"),
            name=read_str(data, "name"),
            code=read_str(data, "code"),
            color=read_str(data, "color"),
            exponent=read_int(data, "exponent"),
            sort_index=read_int(data, "sort_index"),
            address_regex=read_str(data, "address_regex"),
            asset_id=read_str(data, "asset_id"),
        )


@dataclass(slots=True)
class UserCountry:
    code: str = ""
    name: str = ""
    is_in_europe: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserCountry":
        return cls(
            code=read_str(data, "code"),
            name=read_str(data, "name"),
            is_in_europe=read_opt_bool(data, "is_in_europe"),
        )


@dataclass(slots=True)
class UserAuth:
    """Authorization details of the current credentials."""

    method: str = ""
    scopes: List[str] = field(default_factory=list)
    oauth_meta: Optional[Dict[str, str]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserAuth":
        return cls(
            method=read_str(data, "method"),
            scopes=read_str_list(data, "scopes"),
            oauth_meta=read_str_map(data, "oauth_meta") if data.get("oauth_meta") is not None else None,
        )


@dataclass(slots=True)
class Account:
    meta: ResourceMeta = field(default_factory=ResourceMeta)
    kind: AccountType = AccountType.UNKNOWN
    name: str = ""
    balance: Money = field(default_factory=Money)
    currency: AccountCurrency = field(default_factory=AccountCurrency)
    primary: bool = False
    raw_tags: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        raw_tags: Dict[str, str] = {}
        return cls(
            meta=ResourceMeta.from_dict(data),
            kind=read_tag(data, "type", AccountType, raw_tags),
            name=read_str(data, "name"),
            balance=_money(data, "balance"),
            currency=read_record(data, "currency", AccountCurrency.from_dict) or AccountCurrency(),
            primary=read_bool(data, "primary"),
            raw_tags=raw_tags,
        )


@dataclass(slots=True)
class Address:
    meta: ResourceMeta = field(default_factory=ResourceMeta)
    name: Optional[str] = None
    address: str = ""
    network: str = ""
    uri_scheme: Optional[str] = None
    warning_title: Optional[str] = None
    warning_details: Optional[str] = None
    callback_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Address":
        return cls(
            meta=ResourceMeta.from_dict(data),
            name=read_opt_str(data, "name"),
            address=read_str(data, "address"),
            network=read_str(data, "network"),
            uri_scheme=read_opt_str(data, "uri_scheme"),
            warning_title=read_opt_str(data, "warning_title"),
            warning_details=read_opt_str(data, "warning_details"),
            callback_url=read_opt_str(data, "callback_url"),
        )


@dataclass(slots=True)
class Notification:
    meta: ResourceMeta = field(default_factory=ResourceMeta)
    kind: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    user: ResourceRef = field(default_factory=ResourceRef)
    account: ResourceRef = field(default_factory=ResourceRef)
    delivery_attempts: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notification":
        return cls(
            meta=ResourceMeta.from_dict(data),
            kind=read_str(data, "type"),
            data=read_value_map(data, "data") or {},
            user=_ref(data, "user"),
            account=_ref(data, "account"),
            delivery_attempts=read_int(data, "delivery_attempts"),
        )


@dataclass(slots=True)
class PaymentMethod:
    meta: ResourceMeta = field(default_factory=ResourceMeta)
    kind: PaymentMethodType = PaymentMethodType.UNKNOWN
    name: str = ""
    currency: str = ""
    primary_buy: bool = False
    primary_sell: bool = False
    allow_buy: bool = False
    allow_sell: bool = False
    allow_deposit: bool = False
    allow_withdraw: bool = False
    instant_buy: bool = False
    instant_sell: bool = False
    raw_tags: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaymentMethod":
        raw_tags: Dict[str, str] = {}
        flags = {
            name: read_bool(data, name)
            for name in (
                "primary_buy",
                "primary_sell",
                "allow_buy",
                "allow_sell",
                "allow_deposit",
                "allow_withdraw",
                "instant_buy",
                "instant_sell",
            )
        }
        return cls(
            meta=ResourceMeta.from_dict(data),
            kind=read_tag(data, "type", PaymentMethodType, raw_tags),
            name=read_str(data, "name"),
            currency=read_str(data, "currency"),
            raw_tags=raw_tags,
            **flags,
        )


@dataclass(slots=True)
class Transaction:
    meta: ResourceMeta = field(default_factory=ResourceMeta)
    kind: TransactionType = TransactionType.UNKNOWN
    status: TransactionStatus = TransactionStatus.UNKNOWN
    amount: Money = field(default_factory=Money)
    native_amount: Money = field(default_factory=Money)
    description: Optional[str] = None
    details: Dict[str, str] = field(default_factory=dict)
    instant_exchange: bool = False
    network: Optional[Dict[str, Any]] = None
    to: Optional[Dict[str, Any]] = None
    from_: Optional[Dict[str, Any]] = None
    address: Optional[Dict[str, Any]] = None
    application: Optional[Dict[str, Any]] = None
    buy: Optional[Dict[str, Any]] = None
    idem: Optional[str] = None
    raw_tags: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        raw_tags: Dict[str, str] = {}
        return cls(
            meta=ResourceMeta.from_dict(data),
            kind=read_tag(data, "type", TransactionType, raw_tags),
            status=read_tag(data, "status", TransactionStatus, raw_tags),
            amount=_money(data, "amount"),
            native_amount=_money(data, "native_amount"),
            description=read_opt_str(data, "description"),
            details=read_str_map(data, "details"),
            instant_exchange=read_bool(data, "instant_exchange"),
            network=read_value_map(data, "network"),
            to=read_value_map(data, "to"),
            from_=read_value_map(data, "from"),
            address=read_value_map(data, "address"),
            application=read_value_map(data, "application"),
            buy=read_value_map(data, "buy"),
            idem=read_opt_str(data, "idem"),
            raw_tags=raw_tags,
        )


@dataclass(slots=True)
class User:
    meta: ResourceMeta = field(default_factory=ResourceMeta)
    name: Optional[str] = None
    username: Optional[str] = None
    profile_location: Optional[str] = None
    profile_bio: Optional[str] = None
    profile_url: Optional[str] = None
    avatar_url: str = ""
    # wallet:user:read
    time_zone: Optional[str] = None
    native_currency: Optional[str] = None
    bitcoin_unit: Optional[str] = None
    country: Optional[UserCountry] = None
    # wallet:user:email
    email: Optional[str] = None
    tiers: Optional[Dict[str, Any]] = None
    state: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        optional = {
            name: read_opt_str(data, name)
            for name in (
                "name",
                "username",
                "profile_location",
                "profile_bio",
                "profile_url",
                "time_zone",
                "native_currency",
                "bitcoin_unit",
                "email",
                "state",
            )
        }
        return cls(
            meta=ResourceMeta.from_dict(data),
            avatar_url=read_str(data, "avatar_url"),
            country=read_record(data, "country", UserCountry.from_dict),
            tiers=read_value_map(data, "tiers"),
            **optional,
        )


@dataclass(slots=True)
class Transfer:
    """Fields shared by buys, sells, deposits and withdrawals."""

    meta: ResourceMeta = field(default_factory=ResourceMeta)
    status: TransferStatus = TransferStatus.UNKNOWN
    payment_method: ResourceRef = field(default_factory=ResourceRef)
    transaction: ResourceRef = field(default_factory=ResourceRef)
    amount: Money = field(default_factory=Money)
    subtotal: Money = field(default_factory=Money)
    fee: Money = field(default_factory=Money)
    committed: bool = False
    payout_at: Optional[datetime] = None
    raw_tags: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def _common(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        raw_tags: Dict[str, str] = {}
        return {
            "meta": ResourceMeta.from_dict(data),
            "status": read_tag(data, "status", TransferStatus, raw_tags),
            "payment_method": _ref(data, "payment_method"),
            "transaction": _ref(data, "transaction"),
            "amount": _money(data, "amount"),
            "subtotal": _money(data, "subtotal"),
            "fee": _money(data, "fee"),
            "committed": read_bool(data, "committed"),
            "payout_at": read_datetime(data, "payout_at"),
            "raw_tags": raw_tags,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transfer":
        return cls(**cls._common(data))


@dataclass(slots=True)
class Deposit(Transfer):
    pass


@dataclass(slots=True)
class Withdrawal(Transfer):
    pass


@dataclass(slots=True)
class Sell(Transfer):
    total: Money = field(default_factory=Money)
    instant: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sell":
        return cls(
            total=_money(data, "total"),
            instant=read_bool(data, "instant"),
            **cls._common(data),
        )


@dataclass(slots=True)
class Buy(Transfer):
    total: Money = field(default_factory=Money)
    instant: bool = False
    user_reference: Optional[str] = None
    unit_price: Optional[Money] = None
    hold_until: Optional[datetime] = None
    hold_days: Optional[int] = None
    hold_business_days: Optional[int] = None
    is_first_buy: Optional[bool] = None
    requires_completion_step: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Buy":
        return cls(
            total=_money(data, "total"),
            instant=read_bool(data, "instant"),
            user_reference=read_opt_str(data, "user_reference"),
            unit_price=read_record(data, "unit_price", Money.from_dict),
            hold_until=read_datetime(data, "hold_until"),
            hold_days=read_opt_int(data, "hold_days"),
            hold_business_days=read_opt_int(data, "hold_business_days"),
            is_first_buy=read_opt_bool(data, "is_first_buy"),
            requires_completion_step=read_opt_bool(data, "requires_completion_step"),
            **cls._common(data),
        )


__all__ = [
    "Account",
    "AccountCurrency",
    "AccountType",
    "Address",
    "Buy",
    "Deposit",
    "Notification",
    "PaymentMethod",
    "PaymentMethodType",
    "Sell",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "Transfer",
    "TransferStatus",
    "User",
    "UserAuth",
    "UserCountry",
    "Withdrawal",
]
