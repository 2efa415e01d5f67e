"""Signing primitive used to round-trip component state through the browser.

Tokens are Fernet tokens: AES-128-CBC encrypted, HMAC-SHA256 authenticated
and seeded with a random IV, so the same value never produces the same token.
The Fernet key is derived from the configured secret with HKDF-SHA256.

Padding is stripped from the URL-safe base64 form so tokens travel unchanged
through query strings and JSON attributes.
"""

from __future__ import annotations

import base64
from typing import Protocol, runtime_checkable

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .exceptions import ConfigurationError, TokenForgeryError


_KEY_INFO = b"sprout:tokens"


@runtime_checkable
class HashProvider(Protocol):
    """Authority able to sign values and verify tokens it produced."""

    def sign(self, value: str) -> str: ...

    def unsign(self, token: str) -> str: ...


def derive_key(secret_key: bytes) -> bytes:
    """Return a Fernet key derived from ``secret_key``."""
    raw = HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=_KEY_INFO).derive(
        secret_key
    )
    return base64.urlsafe_b64encode(raw)


class HmacSecurity:
    """Default :class:`HashProvider` keyed by a process-wide secret."""

    def __init__(self, secret_key: str | bytes) -> None:
        if isinstance(secret_key, str):
            secret_key = secret_key.encode("utf-8")
        if not secret_key:
            raise ConfigurationError("A non-empty secret key is required to sign tokens.")
        self._fernet = Fernet(derive_key(secret_key))

    def sign(self, value: str) -> str:
        token = self._fernet.encrypt(value.encode("utf-8"))
        return token.rstrip(b"=").decode("ascii")

    def unsign(self, token: str) -> str:
        try:
            raw = token.encode("ascii")
        except (AttributeError, UnicodeEncodeError) as exc:
            raise TokenForgeryError("Token is not valid base64.") from exc

        try:
            payload = self._fernet.decrypt(raw + b"=" * (-len(raw) % 4))
        except InvalidToken as exc:
            raise TokenForgeryError("Token signature does not match.") from exc

        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as exc:  # pragma: no cover - authenticated payloads are UTF-8
            raise TokenForgeryError("Token payload is corrupted.") from exc


__all__ = ["HashProvider", "HmacSecurity", "derive_key"]
