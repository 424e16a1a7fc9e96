from datetime import date, datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    return to_iso(utc_now())


def parse_timestamp(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        value_text = value.strip()
        if not value_text:
            return None
        if value_text.endswith("Z"):
            value_text = value_text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(value_text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def date_stamp(today: Optional[date] = None) -> str:
    today = today or utc_now().date()
    return today.strftime("%Y%m%d")


__all__ = ["date_stamp", "now_iso", "parse_timestamp", "to_iso", "utc_now"]
