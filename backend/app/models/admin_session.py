"""Admin session model: opaque bearer tokens stored as sha256 hashes."""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from app.utils.clock import utcnow


class AdminSession(SQLModel, table=True):
    """An authenticated administrator session."""

    __tablename__ = "admin_session"

    id: Optional[int] = Field(default=None, primary_key=True)
    token_hash: str = Field(unique=True, index=True, max_length=64)
    username: str
    created_at: datetime = Field(default_factory=utcnow)
    expires_at: datetime
    revoked_at: Optional[datetime] = Field(default=None)
