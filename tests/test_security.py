from __future__ import annotations

from cryptography.fernet import Fernet
import pytest

from sprout.core.exceptions import ConfigurationError, TokenForgeryError
from sprout.core.security import HashProvider, HmacSecurity, derive_key


def _flip(token: str, index: int = 20) -> str:
    replacement = "A" if token[index] != "A" else "B"
    return token[:index] + replacement + token[index + 1 :]


def test_sign_round_trips_unicode_payloads() -> None:
    security = HmacSecurity("secret")
    token = security.sign("héllo wörld")
    assert security.unsign(token) == "héllo wörld"


def test_tokens_are_opaque_and_randomised() -> None:
    security = HmacSecurity("secret")
    first = security.sign("_components/search")
    second = security.sign("_components/search")

    assert first != second
    assert "search" not in first
    assert set(first) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")


def test_tampered_token_is_rejected() -> None:
    security = HmacSecurity("secret")
    token = security.sign("42")
    with pytest.raises(TokenForgeryError):
        security.unsign(_flip(token))


def test_token_from_another_secret_is_rejected() -> None:
    token = HmacSecurity("one").sign("42")
    with pytest.raises(TokenForgeryError):
        HmacSecurity("two").unsign(token)


@pytest.mark.parametrize("token", ["", "abc", "!!!", "42"])
def test_garbage_tokens_are_rejected(token: str) -> None:
    with pytest.raises(TokenForgeryError):
        HmacSecurity("secret").unsign(token)


def test_truncated_token_is_rejected() -> None:
    security = HmacSecurity("secret")
    token = security.sign("a longer value that spans blocks" * 3)
    with pytest.raises(TokenForgeryError):
        security.unsign(token[:-6])


def test_empty_secret_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        HmacSecurity("")


def test_hmac_security_satisfies_protocol() -> None:
    assert isinstance(HmacSecurity(b"bytes-secret"), HashProvider)


def test_tokens_are_fernet_tokens_under_the_derived_key() -> None:
    token = HmacSecurity("secret").sign("payload")
    padded = token + "=" * (-len(token) % 4)
    assert Fernet(derive_key(b"secret")).decrypt(padded.encode("ascii")) == b"payload"


def test_non_ascii_tokens_are_rejected() -> None:
    with pytest.raises(TokenForgeryError):
        HmacSecurity("secret").unsign("tökén")
