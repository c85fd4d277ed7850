"""Client for the Coinbase v2 REST API with request signing and envelope decoding."""

from .api_client import CoinbaseAPI, HeaderMap, Method, RequestAssembler, RequestDescriptor, Transport, UrllibTransport
from .auth import Credential, build_message, sign
from .config import APIConfig, Language, load_config
from .errors import AuthError, CoinbaseError, DecodeError, TransportError
from .models import (
    Currency,
    ErrorMessage,
    Money,
    Order,
    Pagination,
    Payload,
    Rates,
    ResourceMeta,
    ResourceRef,
    ResourceType,
    ResponseEnvelope,
    Time,
    WarningMessage,
    decode_envelope,
)
from .version import __version__
from .wallet import (
    Account,
    AccountType,
    Address,
    Buy,
    Deposit,
    Notification,
    PaymentMethod,
    PaymentMethodType,
    Sell,
    Transaction,
    TransactionStatus,
    TransactionType,
    TransferStatus,
    User,
    UserAuth,
    Withdrawal,
)

__all__ = [
    "APIConfig",
    "Language",
    "load_config",
    "CoinbaseAPI",
    "HeaderMap",
    "Method",
    "RequestAssembler",
    "RequestDescriptor",
    "Transport",
    "UrllibTransport",
    "Credential",
    "build_message",
    "sign",
    "AuthError",
    "CoinbaseError",
    "DecodeError",
    "TransportError",
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
    "Account",
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
    "TransferStatus",
    "User",
    "UserAuth",
    "Withdrawal",
    "__version__",
]
