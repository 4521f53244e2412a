"""
Recurrence evaluation for Daybook.

Pure functions deciding whether an event occurs on a given calendar day and
enumerating the days it occurs on. All comparisons are made at day
granularity; the anchor's time-of-day is only reattached to the results.
"""

from datetime import datetime, date
from typing import Iterator

from .date_utils import (
    DayLike, as_day, at_time_of, days_between, each_day, is_same_day,
    months_between, weekday_index,
)
from .models import Event, RecurrenceType


def effective_weekdays(event: Event) -> set[int]:
    """
    Weekdays a weekly rule fires on.

    An empty weekday list means the anchor's own weekday. The default is
    computed here and never written back into the rule.
    """
    weekdays = event.recurrence.weekdays
    if weekdays:
        return set(weekdays)
    return {weekday_index(event.date)}


def _matches_rule(event: Event, day: date) -> bool:
    """Pattern test including the anchor and end-date bounds, ignoring exclusions and count."""
    rule = event.recurrence
    anchor = as_day(event.date)

    if day < anchor:
        return False
    if rule.end_date is not None and day > as_day(rule.end_date):
        return False

    step = rule.step
    kind = rule.type

    if kind == RecurrenceType.DAILY or kind == RecurrenceType.CUSTOM:
        return days_between(anchor, day) % step == 0

    if kind == RecurrenceType.WEEKLY:
        if weekday_index(day) not in effective_weekdays(event):
            return False
        week_diff = days_between(anchor, day) // 7
        return week_diff % step == 0

    if kind == RecurrenceType.MONTHLY:
        # Short months simply have no occurrence, there is no roll-over.
        if day.day != anchor.day:
            return False
        return months_between(anchor, day) % step == 0

    return False


def _within_count(event: Event, day: date) -> bool:
    """True if `day` is among the first `occurrences` matches counted from the anchor."""
    limit = event.recurrence.count_limit
    seen = 0
    for current in each_day(event.date, day):
        if _matches_rule(event, current):
            seen += 1
            if seen > limit:
                return False
    return True


def occurs_on(event: Event, day: DayLike) -> bool:
    """
    Check whether `event` has an occurrence on the calendar day of `day`.

    Non-recurring events occur only on their own day. Recurring events never
    occur before their anchor, after their end date, on an excluded date, or
    beyond their occurrence count. Unknown recurrence types never occur.
    """
    rule = event.recurrence
    day = as_day(day)

    if not rule.is_recurring:
        return is_same_day(event.date, day)

    if not _matches_rule(event, day):
        return False
    if day in rule.excluded_dates:
        return False
    if rule.count_limit is not None:
        return _within_count(event, day)
    return True


def iter_occurrence_days(event: Event, start: DayLike, end: DayLike) -> Iterator[date]:
    """
    Yield the calendar days in [start, end] on which a recurring event occurs.

    The walk is clipped to the anchor on the left and to the rule's end date
    on the right, so it is always finite.
    """
    rule = event.recurrence
    first = max(as_day(event.date), as_day(start))
    last = as_day(end)
    if rule.end_date is not None:
        last = min(last, as_day(rule.end_date))

    for day in each_day(first, last):
        if occurs_on(event, day):
            yield day


def occurrence_dates(event: Event, start: DayLike, end: DayLike) -> list[datetime]:
    """
    All occurrence datetimes of an event between start and end.

    A non-recurring event yields just its own date.
    """
    if not event.is_recurring:
        return [event.date]
    return [at_time_of(day, event.date) for day in iter_occurrence_days(event, start, end)]
