"""
Time Utilities

Providers report time in different shapes:
- CoinGecko: milliseconds since epoch (e.g., 1704110400000)
- CoinMarketCap: ISO-8601 strings (e.g., "2024-01-01T00:00:00.000Z")
- FMP: calendar dates (e.g., "2024-01-31")

The helpers here normalize all of them to timezone-aware UTC datetimes and
derive the three-letter month labels used in historical series. Month
attribution is always done in UTC.
"""

from datetime import datetime, timezone
from typing import Union

from dateutil import parser as dateparser


MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def to_utc_datetime(timestamp: Union[int, float]) -> datetime:
    """
    Convert a timestamp (seconds or milliseconds) to UTC datetime.

    Detection Logic:
        - If timestamp > 1e12: assumed to be milliseconds
        - Otherwise: assumed to be seconds

    Raises:
        ValueError: If timestamp is negative or invalid

    Examples:
        >>> to_utc_datetime(1704110400000)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
        >>> to_utc_datetime(1704110400)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
    """
    if timestamp < 0:
        raise ValueError(f"Timestamp cannot be negative: {timestamp}")

    if timestamp > 1e12:
        timestamp = timestamp / 1000.0

    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OSError, OverflowError, ValueError) as e:
        raise ValueError(f"Invalid timestamp: {timestamp}. Error: {e}")


def parse_date(value: str) -> datetime:
    """
    Parse an ISO date or datetime string into an aware UTC datetime.

    Naive inputs (FMP's "2024-01-31") are taken as UTC.

    Raises:
        ValueError: If the string cannot be parsed
    """
    try:
        dt = dateparser.isoparse(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"Invalid date: {value!r}. Error: {e}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def month_label(value: Union[datetime, int, float, str]) -> str:
    """
    Three-letter month abbreviation for a datetime, epoch timestamp or ISO string.

    Examples:
        >>> month_label(datetime(2024, 3, 15, tzinfo=timezone.utc))
        'Mar'
        >>> month_label("2023-12-31")
        'Dec'
    """
    if isinstance(value, str):
        dt = parse_date(value)
    elif isinstance(value, datetime):
        dt = value if value.tzinfo is None else value.astimezone(timezone.utc)
    else:
        dt = to_utc_datetime(value)
    return MONTH_NAMES[dt.month - 1]


def datetime_to_timestamp(dt: datetime, milliseconds: bool = False) -> int:
    """
    Convert a datetime object to Unix timestamp.

    Naive datetimes are assumed to be UTC. Fractional seconds are truncated.

    Examples:
        >>> dt = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        >>> datetime_to_timestamp(dt)
        1704110400
        >>> datetime_to_timestamp(dt, milliseconds=True)
        1704110400000
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    timestamp = int(dt.timestamp())

    if milliseconds:
        timestamp *= 1000

    return timestamp


def current_utc_datetime() -> datetime:
    """Current time as timezone-aware datetime in UTC."""
    return datetime.now(timezone.utc)


def one_year_before(dt: datetime) -> datetime:
    """Same calendar instant one year earlier (Feb 29 maps to Feb 28)."""
    try:
        return dt.replace(year=dt.year - 1)
    except ValueError:
        return dt.replace(year=dt.year - 1, day=28)
