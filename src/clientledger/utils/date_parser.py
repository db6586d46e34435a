"""Timestamp parsing utilities."""

from datetime import datetime, UTC
from dateutil import parser as date_parser


def parse_timestamp(value: str) -> datetime:
    """Parse a transaction timestamp string.

    Accepts ISO 8601 ("2024-01-15T10:30:00Z") and the looser formats
    understood by dateutil ("15 Jan 2024 10:30").

    Args:
        value: Timestamp string

    Returns:
        datetime; inputs carrying an offset are converted to UTC

    Raises:
        ValueError: If the string cannot be parsed
    """
    if not isinstance(value, str):
        raise ValueError(f"Timestamp must be a string, got {type(value).__name__}")
    if not value.strip():
        raise ValueError("Empty timestamp")
    try:
        parsed = date_parser.parse(value.strip())
        if parsed.tzinfo is not None:
            # Stored in a naive column, so keep the instant as UTC wall time
            parsed = parsed.astimezone(UTC)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse timestamp '{value}': {e}") from e
    return parsed
