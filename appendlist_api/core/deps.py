"""FastAPI dependencies for authentication, access configuration, and database access."""

from typing import Callable, Generator

import jwt
from fastapi import HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from appendlist_api.core.config import settings
from appendlist_api.core.security import principal_from_token
from appendlist_api.db.session import SessionLocal
from appendlist_api.schemas.auth import Principal
from appendlist_api.services.access_service import AccessConfig
from appendlist_api.services.notification_service import PushSender


# Cookie and header names
COOKIE_NAME = "append_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _principal_from_cookie(request: Request) -> Principal | None:
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return None

    try:
        return principal_from_token(token)
    except (jwt.InvalidTokenError, ValidationError):
        raise HTTPException(status_code=401, detail="Invalid session")


def get_current_principal(request: Request) -> Principal:
    """
    Get the authenticated principal from the session cookie.

    Raises:
        HTTPException 401: missing or invalid session
    """
    principal = _principal_from_cookie(request)
    if principal is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return principal


def get_optional_principal(request: Request) -> Principal | None:
    """
    Principal if a session cookie is present, else None.

    Used by read endpoints that anonymous visitors may open. A cookie that
    is present but invalid still fails with 401.
    """
    return _principal_from_cookie(request)


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Apply to state-changing endpoints (POST, PATCH, DELETE).

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'"
        )


def get_access_config() -> AccessConfig:
    """Admin and owner-export allowlists from settings."""
    return AccessConfig.from_settings(settings)


def get_session_factory() -> Callable[[], Session]:
    """Session factory for work that outlives the request (background tasks)."""
    return SessionLocal


def get_push_sender(request: Request) -> PushSender | None:
    """Push transport registered by the host app on ``app.state.push_sender``."""
    return getattr(request.app.state, "push_sender", None)
