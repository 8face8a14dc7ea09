"""Datetime helpers"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes and convert aware ones to UTC.

    SQLite drops tzinfo on the way back from the database, so everything
    read from the store passes through here.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: Optional[datetime]) -> str:
    """
    Format a datetime for human readable exports.

    Returns:
        str: "2025-10-14 10:30:00 UTC" style string, or "" for None
    """
    dt = ensure_utc(dt)
    if dt is None:
        return ""
    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """ISO 8601 with a trailing Z, as used in JSON exports"""
    dt = ensure_utc(dt)
    if dt is None:
        return None
    return dt.isoformat().replace("+00:00", "Z")
