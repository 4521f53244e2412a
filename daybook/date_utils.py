"""
Calendar-day helpers for Daybook.

The recurrence engine reasons about whole calendar days; these helpers strip
or reattach time-of-day so that the rest of the code never has to.
"""

import calendar
from datetime import datetime, date, timedelta, time as dt_time
from typing import Union

DayLike = Union[datetime, date]


def as_day(value: DayLike) -> date:
    """Calendar day of a datetime or date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_same_day(a: DayLike, b: DayLike) -> bool:
    return as_day(a) == as_day(b)


def days_between(start: DayLike, end: DayLike) -> int:
    """Signed number of whole calendar days from start to end."""
    return (as_day(end) - as_day(start)).days


def months_between(start: DayLike, end: DayLike) -> int:
    """Signed number of calendar months from start's month to end's month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def weekday_index(value: DayLike) -> int:
    """Weekday with 0=Sunday .. 6=Saturday."""
    return (as_day(value).weekday() + 1) % 7


def time_of_day(value: DayLike) -> dt_time:
    if isinstance(value, datetime):
        return value.timetz()
    return dt_time(0, 0)


def at_time_of(day: DayLike, reference: DayLike) -> datetime:
    """Combine the calendar day of `day` with the time-of-day of `reference`."""
    return datetime.combine(as_day(day), time_of_day(reference))


def each_day(start: DayLike, end: DayLike):
    """Yield every calendar day from start to end inclusive."""
    current = as_day(start)
    last = as_day(end)
    while current <= last:
        yield current
        current += timedelta(days=1)


def add_months(value: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def start_of_month(value: DayLike) -> date:
    return as_day(value).replace(day=1)


def end_of_month(value: DayLike) -> date:
    day = as_day(value)
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def start_of_week(value: DayLike, week_starts_on: int = 0) -> date:
    """First day of the week containing value; week_starts_on uses 0=Sunday."""
    day = as_day(value)
    offset = (weekday_index(day) - week_starts_on) % 7
    return day - timedelta(days=offset)


def end_of_week(value: DayLike, week_starts_on: int = 0) -> date:
    return start_of_week(value, week_starts_on) + timedelta(days=6)
