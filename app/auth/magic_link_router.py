"""
Magic Link Authentication Endpoints

This module provides the HTML endpoints for magic link authentication:
- GET/POST /login - Show the login form and send a magic link via email
- GET /validate-magic-link - Verify a link and log in (or ask for a name)
- POST /validate-magic-link - Re-verify the link and complete signup
- GET /logout - Destroy the session cookie
- POST /fake-login - Development-only shortcut that logs in an existing user

Every handler that mutates the session returns the response produced by
SessionStore.commit() or SessionStore.destroy_into().
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from app.auth import pages
from app.auth.dependencies import require_logged_out_user
from app.auth.magic_link import MagicLinkService, get_magic_link_service
from app.auth.session import (
    NONCE_KEY,
    USER_ID_KEY,
    Session,
    SessionStore,
    get_session_store,
    get_web_session,
)
from app.auth.users import UserRepository, get_user_repository
from app.core.config import get_settings
from app.core.email import send_magic_link_email
from app.core.errors import NotFoundError
from app.core.validation import LoginForm, SignupForm, validate_form
from app.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)

APP_HOME = "/app"


def _log_in(user: User, session: Session, store: SessionStore) -> Response:
    """Promote the session to authenticated, consume the nonce and go to the app."""
    session.set(USER_ID_KEY, str(user.id))
    session.unset(NONCE_KEY)
    return store.commit(RedirectResponse(APP_HOME, status_code=303), session)


@router.get("/login", response_class=HTMLResponse, dependencies=[Depends(require_logged_out_user)])
async def login_form() -> HTMLResponse:
    """Show the login form."""
    return HTMLResponse(pages.login_page())


@router.post("/login", response_class=HTMLResponse, dependencies=[Depends(require_logged_out_user)])
async def request_magic_link(
    request: Request,
    session: Session = Depends(get_web_session),
    links: MagicLinkService = Depends(get_magic_link_service),
    store: SessionStore = Depends(get_session_store),
) -> Response:
    """
    Request a magic link for passwordless authentication.

    Mints a nonce, stores it in the visitor's session and emails a link
    that embeds the same nonce. The link works only in this browser.
    """
    form_data = await request.form()
    login, errors = validate_form(LoginForm, form_data)

    if login is None:
        return HTMLResponse(
            pages.login_page(email=form_data.get("email"), errors=errors),
            status_code=400,
        )

    issued = links.issue(login.email)
    session.set(NONCE_KEY, issued.nonce)

    try:
        await send_magic_link_email(
            email=login.email,
            magic_link_url=issued.url,
            expires_in_minutes=int(links.max_age.total_seconds() // 60),
        )
    except Exception:
        raise HTTPException(
            status_code=500,
            detail="Failed to send magic link. Please try again."
        )

    logger.info("Magic link issued for %s, nonce: %s", login.email, issued.nonce[:8] + "...")

    return store.commit(HTMLResponse(pages.check_email_page(login.email)), session)


@router.get("/validate-magic-link", response_class=HTMLResponse)
async def validate_magic_link(
    magic: Optional[str] = Query(default=None),
    session: Session = Depends(get_web_session),
    users: UserRepository = Depends(get_user_repository),
    links: MagicLinkService = Depends(get_magic_link_service),
    store: SessionStore = Depends(get_session_store),
) -> Response:
    """
    Redeem a magic link.

    Known emails are logged in straight away. Unknown emails get the signup
    completion form; the nonce stays in the session so the form submission
    can verify the same link again.
    """
    payload = links.verify(magic, session)

    user = await users.find_by_email(payload.email)
    if user is not None:
        logger.info("Magic link redeemed by user %s", str(user.id))
        return _log_in(user, session, store)

    return HTMLResponse(pages.signup_page())


@router.post("/validate-magic-link", response_class=HTMLResponse)
async def complete_signup(
    request: Request,
    magic: Optional[str] = Query(default=None),
    session: Session = Depends(get_web_session),
    users: UserRepository = Depends(get_user_repository),
    links: MagicLinkService = Depends(get_magic_link_service),
    store: SessionStore = Depends(get_session_store),
) -> Response:
    """Create the account for a first-time visitor after re-verifying the link."""
    form_data = await request.form()
    signup, errors = validate_form(SignupForm, form_data)

    if signup is None:
        return HTMLResponse(
            pages.signup_page(
                first_name=form_data.get("firstName"),
                last_name=form_data.get("lastName"),
                errors=errors,
            ),
            status_code=400,
        )

    payload = links.verify(magic, session)

    user = await users.find_by_email(payload.email)
    if user is None:
        user = await users.create(payload.email, signup.first_name, signup.last_name)
        logger.info("Created user %s via magic link signup", str(user.id))
    else:
        logger.info("Signup completed for existing user %s, logging in", str(user.id))

    return _log_in(user, session, store)


@router.get("/logout", response_class=HTMLResponse)
async def logout(
    session: Session = Depends(get_web_session),
    store: SessionStore = Depends(get_session_store),
) -> Response:
    """Log out by deleting the session cookie."""
    return store.destroy_into(HTMLResponse(pages.logout_page()), session)


@router.post("/fake-login")
async def fake_login(
    request: Request,
    session: Session = Depends(get_web_session),
    users: UserRepository = Depends(get_user_repository),
    store: SessionStore = Depends(get_session_store),
) -> Response:
    """Log in as an existing user without a magic link. Disabled in production."""
    if get_settings().is_production:
        raise NotFoundError()

    form_data = await request.form()
    email = form_data.get("email")
    if not isinstance(email, str) or not email:
        return PlainTextResponse("Email is required", status_code=400)

    user = await users.find_by_email(email)
    if user is None:
        return PlainTextResponse("User not found", status_code=404)

    session.set(USER_ID_KEY, str(user.id))
    return store.commit(RedirectResponse(APP_HOME, status_code=303), session)
