"""
Month and week grids for the presentation layer.

Each grid cell carries the projected occurrences of its day, so a renderer
never has to know about recurrence.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional, Sequence

from .date_utils import (
    DayLike, each_day, end_of_month, end_of_week, start_of_month,
    start_of_week,
)
from .models import Event
from .projection import occurrences_on_day


@dataclass
class CalendarDay:
    date: date
    is_current_month: bool
    is_today: bool
    events: list[Event] = field(default_factory=list)


@dataclass
class CalendarMonth:
    days: list[CalendarDay]
    month: int  # 1..12
    year: int

    @property
    def weeks(self) -> list[list[CalendarDay]]:
        return [self.days[i:i + 7] for i in range(0, len(self.days), 7)]


def calendar_month(
    day: DayLike,
    events: Sequence[Event],
    week_starts_on: int = 0,
    today: Optional[date] = None,
) -> CalendarMonth:
    """
    Grid for the month containing `day`, padded to whole weeks with days of
    the neighbouring months.
    """
    if today is None:
        today = date.today()

    month_start = start_of_month(day)
    grid_start = start_of_week(month_start, week_starts_on)
    grid_end = end_of_week(end_of_month(day), week_starts_on)

    days = [
        CalendarDay(
            date=current,
            is_current_month=(current.month == month_start.month),
            is_today=(current == today),
            events=occurrences_on_day(events, current),
        )
        for current in each_day(grid_start, grid_end)
    ]
    return CalendarMonth(days=days, month=month_start.month, year=month_start.year)


def week_days(day: DayLike, week_starts_on: int = 0) -> list[date]:
    """The seven days of the week containing `day`."""
    first = start_of_week(day, week_starts_on)
    return [first + timedelta(days=i) for i in range(7)]


def search_events(events: Sequence[Event], term: str) -> list[Event]:
    """Events whose title or description contains `term`, case-insensitively."""
    needle = term.lower()
    if not needle:
        return list(events)
    return [
        e for e in events
        if needle in e.title.lower() or needle in (e.description or "").lower()
    ]
