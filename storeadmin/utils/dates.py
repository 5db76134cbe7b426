# storeadmin/utils/dates.py
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC, the form every timestamp column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(dt: datetime | None) -> datetime | None:
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso8601(s):
    if not s:
        return None
    if isinstance(s, datetime):
        return as_naive_utc(s)
    s = str(s).strip()
    # support trailing 'Z' (UTC)
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return as_naive_utc(datetime.fromisoformat(s))
    except ValueError:
        return None


def isoformat(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None
