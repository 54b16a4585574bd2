from datetime import datetime, timezone
from dateutil import parser as date_parser


def parse_date_string(date_str: str) -> str | None:
    """Parse various date formats into ISO format."""
    if not date_str:
        return None
    try:
        dt = date_parser.parse(date_str, fuzzy=True)
        return str(dt.isoformat())  # Explicit cast to satisfy mypy
    except (ValueError, OverflowError, TypeError):
        return None


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string for timestamp columns."""
    return datetime.now(timezone.utc).isoformat()

