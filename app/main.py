"""
Recipes Backend - Main Application Entry Point

This module serves as the central configuration point for the Recipes app's
authentication service. It assembles magic-link authentication, the
authenticated home and health monitoring endpoints into a FastAPI
application using the dependency injection pattern.

Authentication is handled by magic links whose nonce is bound to a signed
session cookie; the auth gate dependencies in app.auth.dependencies protect
every route that needs a logged-in user. Settings are loaded at import time,
so a missing secret aborts startup instead of failing the first request.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from app.auth import pages
from app.auth.dependencies import require_logged_in_user
from app.auth.magic_link_router import router as magic_link_router
from app.core.config import get_settings
from app.core.errors import AppError, InvalidLinkError, RedirectSignal
from app.db import dispose_engine
from app.models.user import User, UserRead

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.value,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await dispose_engine()


app = FastAPI(title="Recipes Backend", lifespan=lifespan)


@app.exception_handler(RedirectSignal)
async def redirect_signal_handler(request: Request, exc: RedirectSignal) -> RedirectResponse:
    """Turn auth guard signals into redirects."""
    return RedirectResponse(exc.location, status_code=303)


@app.exception_handler(InvalidLinkError)
async def invalid_link_handler(request: Request, exc: InvalidLinkError) -> JSONResponse:
    """Reject bad magic links without revealing which check failed."""
    logger.info("Magic link rejected: %s", exc.reason)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.message},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "message": exc.message},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": AppError.error, "message": AppError.message},
    )


@app.get("/health", tags=["meta"])
def health_check():
    """Simple health check endpoint returning application status."""
    return {
        "status": "ok",
        "environment": settings.environment.value,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# Include magic-link authentication routes
app.include_router(magic_link_router, tags=["auth"])


@app.get("/app", response_class=HTMLResponse, tags=["app"])
async def app_home(user: User = Depends(require_logged_in_user)) -> HTMLResponse:
    """Authenticated home page."""
    return HTMLResponse(pages.app_home_page(user.first_name))


@app.get("/me", response_model=UserRead, tags=["auth"])
async def read_me(user: User = Depends(require_logged_in_user)) -> UserRead:
    """Return the currently authenticated user's profile information."""
    return UserRead(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
    )
