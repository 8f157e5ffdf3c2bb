"""
Authentication Dependencies for Session-Based Auth

This module provides the FastAPI dependencies that act as the auth gate for
every protected route:

- current_user: resolve the session's userId to a User, or None
- require_logged_in_user: the user, or a redirect to the login page
- require_logged_out_user: a redirect to the app when already logged in

The redirects are raised as LoginRequired / AlreadyAuthenticated and turned
into 303 responses by the exception handlers in app.main.
"""

from typing import Optional

from fastapi import Depends

from app.auth.session import USER_ID_KEY, Session, get_web_session
from app.auth.users import UserRepository, get_user_repository
from app.core.errors import AlreadyAuthenticated, LoginRequired
from app.models.user import User


async def current_user(
    session: Session = Depends(get_web_session),
    users: UserRepository = Depends(get_user_repository),
) -> Optional[User]:
    """
    Get the current user from the session, if any.

    A session pointing at a deleted user is treated as anonymous.
    """
    user_id = session.get(USER_ID_KEY)

    if not isinstance(user_id, str):
        return None

    return await users.find_by_id(user_id)


async def require_logged_in_user(
    user: Optional[User] = Depends(current_user),
) -> User:
    """Return the current user or send the visitor to the login page."""
    if user is None:
        raise LoginRequired()

    return user


async def require_logged_out_user(
    user: Optional[User] = Depends(current_user),
) -> None:
    """Keep login and signup pages unreachable once authenticated."""
    if user is not None:
        raise AlreadyAuthenticated()
