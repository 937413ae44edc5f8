"""
FastAPI dependencies for administrator-only routes.

The resolved AdminSession is passed explicitly to handlers; there is no
ambient "logged in" flag.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.database import get_session
from app.models.admin_session import AdminSession
from app.services.admin_auth import AdminAuthError, resolve_session

bearer_scheme = HTTPBearer(auto_error=False)


def _bearer_token(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if not credentials or credentials.scheme.lower() != "bearer":
        return None
    return credentials.credentials


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> AdminSession:
    """Reject the request with 401 unless it carries a live admin session token."""
    try:
        return resolve_session(session, _bearer_token(credentials))
    except AdminAuthError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


def optional_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Optional[AdminSession]:
    """Admin session if a valid token is present, None otherwise (public views)."""
    token = _bearer_token(credentials)
    if not token:
        return None
    try:
        return resolve_session(session, token)
    except AdminAuthError:
        return None
