"""Viewer timezone helpers for clubcalendar.

Event instants arrive as absolute timestamps; the month grid is laid out in the
viewer's local calendar. Everything that turns an instant into a calendar date
goes through this module so the conversion rules live in one place.
"""

from __future__ import annotations

import datetime
import logging
import os
import zoneinfo
from typing import Any, Union

from dateutil import parser as date_parser

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"

TimezoneLike = Union[str, datetime.tzinfo, None]


def get_default_timezone(fallback: str = DEFAULT_TIMEZONE) -> str:
    """Get the viewer timezone name from the environment with validation.

    Args:
        fallback: Timezone used when CLUBCALENDAR_DEFAULT_TIMEZONE is unset or invalid

    Returns:
        Valid IANA timezone string
    """
    timezone = os.environ.get("CLUBCALENDAR_DEFAULT_TIMEZONE", fallback)

    try:
        zoneinfo.ZoneInfo(timezone)
        return timezone
    except Exception:
        logger.warning(
            "Invalid timezone %r, falling back to %r", timezone, fallback, exc_info=True
        )
        return fallback


def resolve_timezone(tz: TimezoneLike = None) -> datetime.tzinfo:
    """Turn a timezone name, tzinfo, or None into a tzinfo.

    Args:
        tz: IANA name, tzinfo instance, or None for the configured default

    Returns:
        tzinfo instance

    Raises:
        ConfigError: If ``tz`` is a name that zoneinfo does not know
    """
    if isinstance(tz, datetime.tzinfo):
        return tz

    name = tz if tz else get_default_timezone()
    try:
        return zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"Unknown timezone {name!r}") from e


def parse_instant(value: Any) -> datetime.datetime:
    """Parse an event timestamp.

    Accepts ``datetime`` objects unchanged and ISO-8601 strings (including the
    ``Z`` suffix and minute-precision forms such as ``2024-01-15T15:00Z``).

    Raises:
        TypeError: If value is neither a datetime nor a string
        ValueError: If the string is not a valid ISO-8601 timestamp
    """
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, str):
        return date_parser.isoparse(value.strip())
    raise TypeError(f"Expected datetime or ISO string, got {type(value).__name__}")


def localize(instant: datetime.datetime, tz: datetime.tzinfo) -> datetime.datetime:
    """Convert an instant to the viewer timezone.

    Naive datetimes are taken to already be wall-clock time in ``tz``.
    """
    if instant.tzinfo is None:
        return instant.replace(tzinfo=tz)
    return instant.astimezone(tz)


def local_date_of(instant: datetime.datetime, tz: datetime.tzinfo) -> datetime.date:
    """Return the calendar date of ``instant`` as seen from ``tz``."""
    return localize(instant, tz).date()


def now_in_timezone(tz: TimezoneLike = None) -> datetime.datetime:
    """Return the current time in the viewer timezone.

    Can be overridden for testing via the CLUBCALENDAR_TEST_TIME environment
    variable (ISO-8601, e.g. "2024-01-15T08:20:00+00:00").
    """
    zone = resolve_timezone(tz)
    test_time = os.environ.get("CLUBCALENDAR_TEST_TIME")
    if test_time:
        try:
            return localize(date_parser.isoparse(test_time), zone)
        except Exception as e:
            logger.warning("Failed to parse CLUBCALENDAR_TEST_TIME=%r: %s", test_time, e)

    return datetime.datetime.now(zone)


def today_in_timezone(tz: TimezoneLike = None) -> datetime.date:
    """Return today's date in the viewer timezone."""
    return now_in_timezone(tz).date()
