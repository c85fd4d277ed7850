"""Exception hierarchy shared by the signing, transport and decoding layers."""

from __future__ import annotations

from typing import Optional


class CoinbaseError(RuntimeError):
    """Base class for every error raised by the client."""


class AuthError(CoinbaseError):
    """Raised when request authentication cannot be computed.

    This happens before any network traffic: the secret could not be used as
    HMAC key material, or a header value contains characters that are not
    allowed in an HTTP header.
    """


class TransportError(CoinbaseError):
    """Raised when the request could not be delivered or the server rejected it."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class DecodeError(CoinbaseError, ValueError):
    """Raised when a response body cannot be decoded into an envelope.

    ``raw`` holds the response text exactly as received and ``error`` the
    underlying parse failure.
    """

    def __init__(self, message: str, raw: str, error: Optional[BaseException] = None):
        super().__init__(message)
        self.raw = raw
        self.error = error


__all__ = ["AuthError", "CoinbaseError", "DecodeError", "TransportError"]
