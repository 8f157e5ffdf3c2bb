"""
Magic Link Authentication Service

This module provides the core functionality for passwordless authentication
using time-limited magic links. Nothing is stored server-side: the link
itself carries an encrypted payload {email, nonce, createdAt}, and the nonce
is kept in the requesting browser's session.

Security features:
- Authenticated encryption of the payload (see app.auth.token_codec)
- 10-minute expiration window (configurable)
- Nonce binding: a link only works in the browser session that requested it
- Single use: the nonce is removed from the session once the link is consumed
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from app.auth.session import NONCE_KEY, Session
from app.auth.token_codec import DecodeError, TokenCodec, get_token_codec
from app.core.config import get_settings
from app.core.errors import InvalidLinkError

logger = logging.getLogger(__name__)

MAGIC_LINK_PATH = "/validate-magic-link"
MAGIC_LINK_PARAM = "magic"


class MagicLinkPayload(BaseModel):
    """Decrypted contents of a magic link."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    email: StrictStr
    nonce: StrictStr
    created_at: datetime = Field(alias="createdAt")

    @field_validator("created_at", mode="before")
    @classmethod
    def require_iso_string(cls, v: Any) -> Any:
        if not isinstance(v, str):
            raise ValueError("createdAt must be an ISO-8601 timestamp string")
        return v

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


@dataclass(frozen=True)
class IssuedMagicLink:
    """A freshly minted link and the nonce the caller must store in the session."""
    url: str
    nonce: str


class MagicLinkService:
    """Issue and verify magic links."""

    def __init__(self, codec: TokenCodec, origin: str, max_age: timedelta = timedelta(minutes=10)):
        self.codec = codec
        self.origin = origin.rstrip("/")
        self.max_age = max_age

    @staticmethod
    def generate_nonce() -> str:
        """Generate a random, globally unique nonce."""
        return str(uuid.uuid4())

    def issue(self, email: str, now: Optional[datetime] = None) -> IssuedMagicLink:
        """
        Build a signed, time-boxed login link for the given email.

        The email does not need to belong to an existing user: the same flow
        bootstraps signup. The caller must store the returned nonce in the
        requester's session before committing it, otherwise the link can
        never be verified.
        """
        nonce = self.generate_nonce()
        created_at = now or datetime.now(timezone.utc)
        token = self.codec.encode({
            "email": email,
            "nonce": nonce,
            "createdAt": created_at.isoformat(),
        })
        return IssuedMagicLink(url=self.build_url(token), nonce=nonce)

    def build_url(self, token: str) -> str:
        """Build the complete magic link URL for email delivery."""
        return f"{self.origin}{MAGIC_LINK_PATH}?{urlencode({MAGIC_LINK_PARAM: token})}"

    @staticmethod
    def token_from_url(url: str) -> Optional[str]:
        """Extract the token parameter from a magic link URL, if present."""
        values = parse_qs(urlsplit(url).query).get(MAGIC_LINK_PARAM)
        return values[0] if values else None

    def verify(
        self,
        token: Optional[str],
        session: Session,
        now: Optional[datetime] = None,
    ) -> MagicLinkPayload:
        """
        Validate a magic link token against the current session.

        Checks run in a fixed order and the first failure wins:
        parameter present, token decodes, payload shape, expiry, nonce.
        Does not mutate the session; consuming the nonce is the caller's
        job once the login or signup actually succeeds.
        """
        if not token:
            raise InvalidLinkError("parameter absent")

        try:
            decoded = self.codec.decode(token)
        except DecodeError:
            raise InvalidLinkError("malformed/tampered token")

        if not isinstance(decoded, dict):
            raise InvalidLinkError("invalid payload shape")
        try:
            payload = MagicLinkPayload.model_validate(decoded)
        except ValidationError:
            raise InvalidLinkError("invalid payload shape")

        now = now or datetime.now(timezone.utc)
        if now > payload.created_at + self.max_age:
            raise InvalidLinkError("expired")

        if session.get(NONCE_KEY) != payload.nonce:
            raise InvalidLinkError("nonce mismatch")

        return payload

    def verify_url(
        self,
        url: str,
        session: Session,
        now: Optional[datetime] = None,
    ) -> MagicLinkPayload:
        """Verify a full incoming magic link URL."""
        return self.verify(self.token_from_url(url), session, now=now)


@lru_cache()
def get_magic_link_service() -> MagicLinkService:
    """Return the process-wide magic link service built from settings."""
    settings = get_settings()
    return MagicLinkService(
        codec=get_token_codec(),
        origin=settings.origin,
        max_age=timedelta(minutes=settings.magic_link_max_age_minutes),
    )
