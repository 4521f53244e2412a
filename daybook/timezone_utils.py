"""
Timezone utilities for Daybook.

Events are kept as naive local wall-clock datetimes. Remote providers speak
UTC, so conversions happen only at the sync boundary.
"""

from datetime import datetime
import time as _time
import pytz


# Default timezone - can be overridden by config
_local_timezone_name: str = "Europe/Amsterdam"


def set_timezone(timezone_name: str):
    """Set the local timezone for the application."""
    global _local_timezone_name
    pytz.timezone(timezone_name)  # raises UnknownTimeZoneError early
    _local_timezone_name = timezone_name


def get_local_timezone():
    """
    Get the local timezone as a pytz timezone object.

    Falls back to the system timezone, then to a fixed offset.
    """
    try:
        return pytz.timezone(_local_timezone_name)
    except pytz.UnknownTimeZoneError:
        try:
            return pytz.timezone(_time.tzname[0])
        except pytz.UnknownTimeZoneError:
            is_dst = _time.localtime().tm_isdst
            if is_dst:
                offset_seconds = -_time.altzone
            else:
                offset_seconds = -_time.timezone
            return pytz.FixedOffset(offset_seconds // 60)


def local_naive_to_utc(dt: datetime) -> datetime:
    """
    Convert a naive local datetime to an aware UTC datetime.

    Aware input is simply converted to UTC.
    """
    if dt.tzinfo is None:
        local_tz = get_local_timezone()
        local_dt = local_tz.localize(dt)
        return local_dt.astimezone(pytz.UTC)
    return dt.astimezone(pytz.UTC)


def utc_to_local_naive(dt: datetime) -> datetime:
    """
    Convert an aware datetime to a naive local datetime.

    Naive input is assumed to already be local and returned unchanged.
    """
    if dt.tzinfo is not None:
        local_dt = dt.astimezone(get_local_timezone())
        return local_dt.replace(tzinfo=None)
    return dt
