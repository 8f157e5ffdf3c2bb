"""
Authentication System

Passwordless authentication for the Recipes app: magic links whose nonce is
bound to a signed session cookie, plus the auth gate dependencies used by
every protected route.
"""

from app.auth.dependencies import current_user, require_logged_in_user, require_logged_out_user  # noqa: F401
from app.auth.session import Session, SessionStore, get_session_store, get_web_session  # noqa: F401
