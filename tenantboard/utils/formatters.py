"""
Formatting helpers shared by models and API responses.
"""
from datetime import datetime, timezone
from typing import Optional


def iso(value: Optional[datetime]) -> Optional[str]:
    """
    Format a datetime as ISO-8601 for JSON output.

    Naive datetimes (SQLite drops tzinfo) are assumed to be UTC.

    Examples:
        iso(datetime(2025, 1, 1, tzinfo=timezone.utc)) -> "2025-01-01T00:00:00+00:00"
        iso(None) -> None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 string (date or datetime, optional trailing Z).

    Raises:
        ValueError: if the string is not ISO-8601
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError('Invalid datetime')
    text = value.strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
