from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_business_date(value: Any) -> Optional[date]:
    """
    Business date for shipped dates, drawer balances and report ranges.

    Takes a date, a datetime, "YYYY-MM-DD" or a full ISO-8601 timestamp
    ("...Z" and offsets are moved to UTC first). Blank input is None;
    anything unparseable raises ValueError.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _naive_utc(value).date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None
    if len(s) == 10:
        return date.fromisoformat(s)
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return _naive_utc(datetime.fromisoformat(s)).date()


def day_bounds(start: Optional[date], end: Optional[date]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Inclusive business-day range -> [start 00:00, end+1 00:00) datetimes."""
    start_dt = datetime.combine(start, time.min) if start else None
    end_dt = datetime.combine(end + timedelta(days=1), time.min) if end else None
    return start_dt, end_dt


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with a trailing 'Z'; naive values are already UTC."""
    if dt is None:
        return None
    return _naive_utc(dt).replace(microsecond=0).isoformat() + "Z"
