"""Credentials and the HMAC request-signing protocol."""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from .errors import AuthError

Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class Credential:
    """API key pair. Both values empty means anonymous access."""

    key: str = ""
    secret: str = field(default="", repr=False)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.key) and bool(self.secret)


def _key_material(secret: Union[str, bytes]) -> bytes:
    if isinstance(secret, bytes):
        return secret
    if not isinstance(secret, str):
        raise AuthError(f"API secret must be str or bytes, not {type(secret).__name__}")
    try:
        return secret.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise AuthError("API secret cannot be encoded as key material") from exc


def sign(secret: Union[str, bytes], message: str) -> str:
    """Return the lowercase hex HMAC-SHA256 of ``message`` keyed by ``secret``."""

    key = _key_material(secret)
    try:
        payload = message.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise AuthError("Message to sign is not valid UTF-8") from exc
    return hmac.new(key, payload, hashlib.sha256).hexdigest()


def build_message(
    timestamp: int,
    method: str,
    path: str,
    query: Optional[str] = None,
    body: Union[str, bytes] = "",
) -> str:
    """Concatenate the request parts into the string the server re-signs.

    The layout is ``timestamp + METHOD + path [+ "?" + query] + body`` with no
    separators; the ``?`` is present only when a query string is.
    """

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise AuthError("Request body is not valid UTF-8") from exc
    message = f"{int(timestamp)}{method.upper()}{path}"
    if query:
        message += f"?{query}"
    return message + body


__all__ = ["Clock", "Credential", "build_message", "sign"]
