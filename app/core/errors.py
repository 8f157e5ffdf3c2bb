"""
Application Error Taxonomy

A small closed set of tagged errors raised by the authentication flow and
matched explicitly by the exception handlers registered in app.main.

- InvalidLinkError: a magic link failed verification. Carries the internal
  reason for logging; clients only ever see the generic public message.
- LoginRequired / AlreadyAuthenticated: control-flow signals from the auth
  guards, converted into redirects at the response boundary.
- NotFoundError / ForbiddenError: per-resource lookups and ownership checks.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors converted to responses at the boundary."""

    status_code: int = 500
    error: str = "internal_error"
    message: str = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidLinkError(AppError):
    """Raised when a magic link is missing, tampered, expired or bound to another session."""

    status_code = 400
    error = "invalid_magic_link"
    message = "This magic link is invalid or has expired. Please request a new one."

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__()

    def __repr__(self) -> str:
        return f"InvalidLinkError(reason={self.reason!r})"


class RedirectSignal(AppError):
    """A guard outcome that sends the visitor somewhere else."""

    status_code = 303
    location: str = "/"


class LoginRequired(RedirectSignal):
    error = "authentication_required"
    message = "Authentication is required to access this resource"
    location = "/login"


class AlreadyAuthenticated(RedirectSignal):
    error = "already_authenticated"
    message = "You are already logged in"
    location = "/app"


class NotFoundError(AppError):
    status_code = 404
    error = "not_found"
    message = "The requested resource does not exist"


class ForbiddenError(AppError):
    status_code = 403
    error = "forbidden"
    message = "You are not authorized to make changes to this resource"
