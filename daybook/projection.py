"""
Occurrence projection for Daybook.

Turns the stored templates into the concrete occurrences that fall on a day
or inside a range. Occurrences are recomputed on every query and never
persisted; their ids are derived from (template id, day) so that repeated
projections agree with each other.
"""

import heapq
from datetime import date
from typing import Iterable, Iterator, Sequence

from .date_utils import DayLike, as_day, at_time_of, is_same_day
from .models import Event
from .recurrence import iter_occurrence_days, occurs_on


def occurrence_id(template_id: str, day: DayLike) -> str:
    """Synthetic id of the occurrence of `template_id` on `day`, e.g. 'abc-2025-01-03'."""
    return f"{template_id}-{as_day(day).isoformat()}"


def materialize(event: Event, day: DayLike) -> Event:
    """Build the occurrence record of a recurring template on `day`."""
    return event.copy(
        id=occurrence_id(event.id, day),
        date=at_time_of(day, event.date),
        parent_id=event.id,
    )


def occurrences_on_day(events: Iterable[Event], day: DayLike) -> list[Event]:
    """
    Everything that occurs on `day`, in input order.

    An event anchored on `day` is returned as is unless that day was excluded
    from its series; a recurring event that occurs on `day` is returned as a
    materialized occurrence.
    """
    result = []
    for event in events:
        if is_same_day(event.date, day):
            if as_day(day) in event.recurrence.excluded_dates:
                continue
            result.append(event)
        elif event.is_recurring and occurs_on(event, day):
            result.append(materialize(event, day))
    return result


class OccurrenceRange:
    """
    Lazy, restartable view over the occurrences of recurring events in a range.

    Each iteration recomputes the occurrences from scratch. Results are
    ordered by day; occurrences on the same day keep the input order of
    their templates.
    """

    def __init__(self, events: Sequence[Event], start: DayLike, end: DayLike):
        self.events = [e for e in events if e.is_recurring]
        self.start = as_day(start)
        self.end = as_day(end)

    def _event_stream(self, event: Event) -> Iterator[tuple[date, Event]]:
        for day in iter_occurrence_days(event, self.start, self.end):
            yield day, materialize(event, day)

    def __iter__(self) -> Iterator[Event]:
        streams = [self._event_stream(event) for event in self.events]
        for _day, occurrence in heapq.merge(*streams, key=lambda item: item[0]):
            yield occurrence

    def __repr__(self):
        return f"OccurrenceRange({len(self.events)} templates, {self.start} .. {self.end})"


def occurrences_in_range(events: Sequence[Event], start: DayLike, end: DayLike) -> OccurrenceRange:
    """Materialized occurrences of all recurring events between start and end inclusive."""
    return OccurrenceRange(events, start, end)
