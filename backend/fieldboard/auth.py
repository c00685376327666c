"""Session resolution against the external auth provider's tables.

Sign-in, OAuth and cookie issuance are handled by the provider; this module
only maps an incoming session token to a user id.
"""

import re
from datetime import datetime, timezone

from fastapi import Depends, Request
from sqlalchemy import func, select
from sqlalchemy.orm import Session
import structlog

from .db import get_db
from .exceptions import AuthenticationError, ValidationError
from .models import AuthSession, AuthUser

logger = structlog.get_logger()

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def extract_session_token(request: Request) -> str | None:
    """Bearer token, else the provider's session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    cookie_name = request.app.state.settings.session_cookie_name
    cookie = request.cookies.get(cookie_name)
    if not cookie:
        return None
    # signed cookies look like "<token>.<signature>"
    return cookie.split(".", 1)[0] or None


def resolve_user_id(db: Session, token: str) -> str | None:
    stmt = select(AuthSession.user_id).where(
        AuthSession.token == token,
        AuthSession.expires_at > datetime.now(timezone.utc),
    )
    return db.scalars(stmt).first()


def get_current_user_id(request: Request, db: Session = Depends(get_db)) -> str:
    """Get the caller's user id from their session.

    Raises 401 if no token is sent or the session is unknown or expired.
    """
    token = extract_session_token(request)
    if not token:
        raise AuthenticationError()

    user_id = resolve_user_id(db, token)
    if user_id is None:
        logger.info("session_rejected")
        raise AuthenticationError()

    return user_id


def email_exists(db: Session, email: str | None) -> bool:
    normalized = (email or "").strip().lower()
    if not normalized or not EMAIL_REGEX.match(normalized):
        raise ValidationError("Invalid email.")

    stmt = select(AuthUser.id).where(func.lower(AuthUser.email) == normalized)
    return db.scalars(stmt).first() is not None
