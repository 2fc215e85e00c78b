"""Parsing helpers for provider timestamps."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse ISO-8601 strings (``Z`` suffix and date-only accepted) into aware UTC datetimes."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(value: Any) -> Optional[str]:
    dt = parse_datetime(value)
    return dt.isoformat().replace("+00:00", "Z") if dt else None


def to_date_str(value: Any) -> Optional[str]:
    dt = parse_datetime(value)
    return dt.date().isoformat() if dt else None
