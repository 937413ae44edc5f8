"""Administrator login and bearer session tokens.

Credentials come from the environment:
  - ADMIN_USERNAME
  - ADMIN_PASSWORD
  - ADMIN_SESSION_TTL_HOURS

Tokens are random and opaque; only their sha256 hash is stored in
admin_session, so a leaked table does not leak usable tokens.
"""

import hashlib
import hmac
import logging
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session, select

from app.models.admin_session import AdminSession
from app.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_HOURS = 12


class AdminAuthError(Exception):
    """Invalid credentials or session."""


@dataclass
class IssuedSession:
    access_token: str
    expires_at: datetime
    username: str
    token_type: str = "bearer"


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _session_ttl() -> timedelta:
    try:
        hours = float(os.getenv("ADMIN_SESSION_TTL_HOURS", DEFAULT_SESSION_TTL_HOURS))
    except ValueError:
        logger.warning("Invalid ADMIN_SESSION_TTL_HOURS, using default")
        hours = DEFAULT_SESSION_TTL_HOURS
    return timedelta(hours=hours)


def check_credentials(username: str, password: str) -> bool:
    expected_user = os.getenv("ADMIN_USERNAME", "admin")
    expected_password = os.getenv("ADMIN_PASSWORD", "")
    if not expected_password:
        logger.warning("ADMIN_PASSWORD is not configured. Admin login is disabled.")
        return False
    user_ok = hmac.compare_digest(username.encode("utf-8"), expected_user.encode("utf-8"))
    password_ok = hmac.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8"))
    return user_ok and password_ok


def login(session: Session, username: str, password: str) -> IssuedSession:
    """
    Create an admin session.

    Raises:
        AdminAuthError: credentials do not match
    """
    if not check_credentials(username, password):
        logger.warning(f"Failed admin login for '{username}'")
        raise AdminAuthError("Invalid username or password")

    token = secrets.token_urlsafe(32)
    expires_at = utcnow() + _session_ttl()
    session.add(AdminSession(token_hash=hash_token(token), username=username, expires_at=expires_at))
    session.commit()
    logger.info(f"Admin '{username}' logged in")
    return IssuedSession(access_token=token, expires_at=expires_at, username=username)


def resolve_session(session: Session, token: Optional[str]) -> AdminSession:
    """
    Look up a live session for a bearer token.

    Raises:
        AdminAuthError: token missing, unknown, revoked or expired
    """
    if not token:
        raise AdminAuthError("Missing bearer token")
    admin_session = session.exec(select(AdminSession).where(AdminSession.token_hash == hash_token(token))).first()
    if admin_session is None:
        raise AdminAuthError("Invalid session token")
    if admin_session.revoked_at is not None:
        raise AdminAuthError("Session has been revoked")
    if as_utc(admin_session.expires_at) <= utcnow():
        raise AdminAuthError("Session has expired")
    return admin_session


def logout(session: Session, admin_session: AdminSession) -> None:
    admin_session.revoked_at = utcnow()
    session.add(admin_session)
    session.commit()
    logger.info(f"Admin '{admin_session.username}' logged out")
