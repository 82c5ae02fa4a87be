"""UTC timestamp helpers. Supabase stores timestamps as ISO-8601 strings."""
from datetime import datetime, timedelta, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def hours_from_now_iso(hours: float) -> str:
    return (utc_now() + timedelta(hours=hours)).isoformat()


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a Postgres/ISO timestamp; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_past(value: Union[str, datetime, None], now: Optional[datetime] = None) -> bool:
    """True when the timestamp is set and already behind now. Null never expires."""
    moment = parse_timestamp(value)
    if moment is None:
        return False
    return moment <= (now or utc_now())
