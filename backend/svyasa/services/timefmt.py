from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def relative_time(ts: datetime, now: Optional[datetime] = None) -> str:
    now = as_utc(now) if now is not None else utcnow()
    seconds = int((now - as_utc(ts)).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{_plural(seconds // 60, 'minute')} ago"
    if seconds < 86400:
        return f"{_plural(seconds // 3600, 'hour')} ago"
    return f"{_plural(seconds // 86400, 'day')} ago"


def time_remaining(expires_at: datetime, now: Optional[datetime] = None) -> str:
    now = as_utc(now) if now is not None else utcnow()
    expires_at = as_utc(expires_at)
    if expires_at <= now:
        return "Expired"
    seconds = int((expires_at - now).total_seconds())
    hours, rest = divmod(seconds, 3600)
    minutes = rest // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
