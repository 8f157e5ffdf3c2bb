"""Tests for the magic link token codec."""

import base64
import re

import pytest
from cryptography.fernet import Fernet

from app.auth.token_codec import DecodeError, TokenCodec, derive_key

SECRET = "codec-secret-0123456789abcdef0123456789abcdef"
OTHER_SECRET = "another-secret-0123456789abcdef0123456789abcd"


@pytest.fixture(scope="module")
def codec() -> TokenCodec:
    return TokenCodec(SECRET)


@pytest.mark.parametrize(
    "payload",
    (
        {"email": "cook@example.com", "nonce": "abc", "createdAt": "2026-10-19T12:00:00+00:00"},
        {"nested": {"list": [1, 2.5, None, True]}, "unicode": "señora"},
        "plain string",
        [],
    ),
)
def test_decode_returns_what_was_encoded(codec: TokenCodec, payload) -> None:
    assert codec.decode(codec.encode(payload)) == payload


def test_tokens_are_url_safe(codec: TokenCodec) -> None:
    token = codec.encode({"email": "a+b@example.com", "nonce": "x" * 40})
    assert re.fullmatch(r"[A-Za-z0-9_\-=]+", token)


def test_same_payload_encodes_to_different_tokens(codec: TokenCodec) -> None:
    payload = {"email": "cook@example.com"}
    assert codec.encode(payload) != codec.encode(payload)


def test_token_from_another_secret_is_rejected(codec: TokenCodec) -> None:
    foreign = TokenCodec(OTHER_SECRET).encode({"email": "cook@example.com"})
    with pytest.raises(DecodeError):
        codec.decode(foreign)


def test_tampered_token_is_rejected(codec: TokenCodec) -> None:
    token = codec.encode({"email": "cook@example.com"})
    raw = bytearray(base64.urlsafe_b64decode(token))
    raw[-40] ^= 0x01
    tampered = base64.urlsafe_b64encode(bytes(raw)).decode("ascii")
    with pytest.raises(DecodeError):
        codec.decode(tampered)


def test_truncated_token_is_rejected(codec: TokenCodec) -> None:
    token = codec.encode({"email": "cook@example.com"})
    with pytest.raises(DecodeError):
        codec.decode(token[:-10])


@pytest.mark.parametrize(
    "token",
    ("", "not-a-token", "gAAAAABjunk", "ñandú", "%%%%", "a" * 200),
)
def test_garbage_is_rejected(codec: TokenCodec, token: str) -> None:
    with pytest.raises(DecodeError):
        codec.decode(token)


def test_non_json_plaintext_is_rejected(codec: TokenCodec) -> None:
    token = Fernet(derive_key(SECRET)).encrypt(b"definitely not json").decode("ascii")
    with pytest.raises(DecodeError):
        codec.decode(token)


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        TokenCodec("")
