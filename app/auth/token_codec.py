"""
Token Codec for Magic Link Payloads

Encrypts a small JSON payload into an opaque, URL-safe string and back.
It uses Fernet (symmetric authenticated encryption, AES 128 in CBC mode with
an HMAC-SHA256 tag) from the cryptography library, so a token that was
tampered with, truncated, or produced under another secret never decodes.

The Fernet key is derived from the configured MAGIC_LINK_SECRET with PBKDF2,
which lets operators use any sufficiently long string as the secret and swap
it through configuration alone.
"""

import base64
import json
from functools import lru_cache
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from app.core.config import get_settings


KEY_DERIVATION_SALT = b"recipes-magic-link-salt"
KEY_DERIVATION_ITERATIONS = 100_000


class DecodeError(Exception):
    """Raised when a token was not produced by encode() under the current secret."""


def derive_key(secret: str) -> bytes:
    """Derive a Fernet key from an arbitrary secret string."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=KEY_DERIVATION_SALT,
        iterations=KEY_DERIVATION_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))


class TokenCodec:
    """Encode JSON-serializable values into opaque tokens and decode them back."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("TokenCodec requires a non-empty secret")
        self._cipher = Fernet(derive_key(secret))

    def encode(self, payload: Any) -> str:
        """Serialize and encrypt a payload. The result is safe to use in a URL."""
        plaintext = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        return self._cipher.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decode(self, token: str) -> Any:
        """
        Decrypt and deserialize a token produced by encode().

        Raises DecodeError for every token this codec did not produce,
        whatever the reason (bad signature, truncation, wrong key, junk input).
        """
        if not isinstance(token, str) or not token:
            raise DecodeError("Token must be a non-empty string")

        try:
            plaintext = self._cipher.decrypt(token.encode("ascii"))
            return json.loads(plaintext.decode("utf-8"))
        except (InvalidToken, ValueError) as e:
            # ValueError covers non-ASCII input and undecodable plaintext
            raise DecodeError("Token could not be decoded") from e


@lru_cache()
def get_token_codec() -> TokenCodec:
    """Return the process-wide codec keyed by MAGIC_LINK_SECRET."""
    settings = get_settings()
    return TokenCodec(settings.magic_link_secret.get_secret_value())
