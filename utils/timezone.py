"""UTC timestamps for issues, messages, sessions and audit entries."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Aware datetime in UTC; every timestamp the service writes comes from here."""
    return datetime.now(timezone.utc)


def parse_iso(value: str) -> datetime:
    """
    Read back a timestamp written with ``isoformat()``, normalized to UTC.

    Raises:
        ValueError: Unparseable, or naive (no UTC offset)
    """
    parsed = datetime.fromisoformat(value)
    if parsed.utcoffset() is None:
        raise ValueError(f"Timestamp '{value}' is naive; an explicit UTC offset is required")
    return parsed.astimezone(timezone.utc)
