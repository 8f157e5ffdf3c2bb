"""
Session Management Service

This module provides the cookie-backed session used by the authentication
flow. The whole session bag is serialized into a single signed cookie, so the
server keeps no session table: the browser holds the state and the signature
guarantees it was written by us.

Features:
- Signed, timestamped cookie values (itsdangerous)
- Secret rotation: the first configured secret signs, every secret verifies
- Forged, expired or garbage cookies degrade to an anonymous session
- Explicit commit: handlers return the response produced by commit() or
  destroy_into(), so a mutated session always reaches the browser
"""

import logging
from datetime import datetime, timezone
from functools import lru_cache
from http.cookies import SimpleCookie
from typing import Any, Dict, Iterable, List, Optional

from fastapi import Request, Response
from itsdangerous import BadData, URLSafeTimedSerializer
from starlette.requests import cookie_parser

from app.core.config import get_settings

logger = logging.getLogger(__name__)

USER_ID_KEY = "userId"
NONCE_KEY = "nonce"


class Session:
    """In-memory view of the session bag carried by the session cookie."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(data or {})
        self.modified = False

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.modified = True

    def unset(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self.modified = True

    def clear(self) -> None:
        if self._data:
            self._data.clear()
            self.modified = True

    def has(self, key: str) -> bool:
        return key in self._data

    @property
    def is_empty(self) -> bool:
        return not self._data

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __repr__(self) -> str:
        return f"Session(keys={sorted(self._data)!r}, modified={self.modified})"


class SessionStore:
    """Load, persist and destroy sessions stored in a signed cookie."""

    SESSION_COOKIE_NAME = "recipes__session"
    SIGNING_SALT = "recipes.session"

    def __init__(
        self,
        secrets: Iterable[str],
        max_age: int,
        secure: bool = True,
        cookie_name: str = SESSION_COOKIE_NAME,
    ):
        secret_list: List[str] = [secret for secret in secrets if secret]
        if not secret_list:
            raise ValueError("SessionStore requires at least one secret")

        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure
        # itsdangerous signs with the last key and verifies with all of them
        self._serializer = URLSafeTimedSerializer(
            secret_key=list(reversed(secret_list)),
            salt=self.SIGNING_SALT,
        )

    def load(self, cookie_header: Optional[str]) -> Session:
        """
        Parse and authenticate the incoming Cookie header.

        Never raises: a missing, tampered, expired or unparsable cookie
        yields a fresh empty session so the visitor can simply log in again.
        """
        if not cookie_header:
            return Session()

        try:
            raw_value = cookie_parser(cookie_header).get(self.cookie_name)
        except Exception:
            logger.info("Unparsable cookie header, starting an anonymous session")
            return Session()

        if not raw_value:
            return Session()

        try:
            data = self._serializer.loads(raw_value, max_age=self.max_age)
        except BadData:
            logger.info("Rejected session cookie with invalid or expired signature")
            return Session()

        if not isinstance(data, dict):
            logger.info("Rejected session cookie with unexpected payload type")
            return Session()

        return Session(data)

    def persist(self, session: Session) -> str:
        """Serialize and sign the session into a Set-Cookie header value."""
        value = self._serializer.dumps(session.to_dict())
        return self._build_cookie(value, max_age=self.max_age)

    def destroy(self, session: Session) -> str:
        """Clear the session and return a Set-Cookie header value deleting the cookie."""
        session.clear()
        return self._build_cookie(
            "",
            max_age=0,
            expires=datetime(1970, 1, 1, tzinfo=timezone.utc),
        )

    def commit(self, response: Response, session: Session) -> Response:
        """Attach the signed session to the response and return the response."""
        response.headers.append("set-cookie", self.persist(session))
        session.modified = False
        return response

    def destroy_into(self, response: Response, session: Session) -> Response:
        """Attach a cookie deletion to the response and return the response."""
        response.headers.append("set-cookie", self.destroy(session))
        session.modified = False
        return response

    def _build_cookie(
        self,
        value: str,
        max_age: int,
        expires: Optional[datetime] = None,
    ) -> str:
        cookie: SimpleCookie = SimpleCookie()
        cookie[self.cookie_name] = value
        morsel = cookie[self.cookie_name]
        morsel["path"] = "/"
        morsel["max-age"] = max_age
        morsel["httponly"] = True
        morsel["samesite"] = "lax"
        if self.secure:
            morsel["secure"] = True
        if expires is not None:
            morsel["expires"] = expires.strftime("%a, %d %b %Y %H:%M:%S GMT")
        return morsel.OutputString()


@lru_cache()
def get_session_store() -> SessionStore:
    """Return the process-wide session store built from settings."""
    settings = get_settings()
    return SessionStore(
        secrets=settings.cookie_secrets,
        max_age=settings.session_max_age_days * 24 * 60 * 60,
        secure=settings.is_production,
    )


async def get_web_session(request: Request) -> Session:
    """Load the session for the current request from its Cookie header."""
    return get_session_store().load(request.headers.get("cookie"))
