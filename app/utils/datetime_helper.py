"""Date and time helpers"""
from datetime import datetime, date, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()


def epoch_millis(dt: Optional[datetime] = None) -> int:
    """Milliseconds since the epoch, used to build unique order ids"""
    return int((dt or utc_now()).timestamp() * 1000)


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp as stored by Supabase.

    Accepts a trailing 'Z'. Returns None for empty input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    return ensure_aware(datetime.fromisoformat(value.replace("Z", "+00:00")))
