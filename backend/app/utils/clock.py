"""
UTC clock helpers.

All timestamps are written timezone-aware. SQLite hands DateTime columns back
naive on some driver versions, so values read from the DB go through as_utc()
before they are compared with utcnow().
"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive datetime; convert an aware one to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
