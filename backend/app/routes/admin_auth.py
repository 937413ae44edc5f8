"""Admin login/logout. Returns an opaque bearer token for the admin routes."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from app.database import get_session
from app.models.admin_session import AdminSession
from app.services.admin_auth import AdminAuthError, login, logout
from app.utils.admin_guards import require_admin

router = APIRouter()


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str
    expires_at: datetime


class SessionResponse(BaseModel):
    username: str
    created_at: datetime
    expires_at: datetime


@router.post("/admin/login", response_model=LoginResponse)
def admin_login(credentials: LoginRequest, session: Session = Depends(get_session)):
    try:
        issued = login(session, credentials.username, credentials.password)
    except AdminAuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return LoginResponse(access_token=issued.access_token, token_type=issued.token_type, expires_at=issued.expires_at)


@router.post("/admin/logout", status_code=204)
def admin_logout(session: Session = Depends(get_session), admin: AdminSession = Depends(require_admin)):
    logout(session, admin)


@router.get("/admin/session", response_model=SessionResponse)
def admin_session(admin: AdminSession = Depends(require_admin)):
    return SessionResponse(username=admin.username, created_at=admin.created_at, expires_at=admin.expires_at)
