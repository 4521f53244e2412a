"""
Event Store for Daybook.

The single source of truth for the event list and the current view date.
One EventStore is constructed at startup and passed to whatever needs it.
Every mutation is persisted right away; a failed write is logged by the
storage backend and the in-memory list stays authoritative.
"""

import sys
from datetime import datetime
from typing import Callable, Optional, Sequence, Union

from .conflicts import find_conflicts
from .date_utils import DayLike, add_months, as_day
from .event_storage import EventStorageBackend, create_storage_backend
from .models import Event
from .projection import OccurrenceRange, occurrences_in_range, occurrences_on_day
from .relocation import RelocationAction, plan_relocation
from .remote_sync import RemoteCalendarAdapter, sync_events


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] STORE: {msg}", file=sys.stderr)


class EventStore:
    """
    Holds templates and standalone events and applies user edits to them.

    Materialized occurrences are never stored here; they are projected on
    demand by occurrences_on_day() and occurrences_in_range().
    """

    def __init__(
        self,
        storage: Optional[EventStorageBackend] = None,
        current_date: Optional[datetime] = None,
    ):
        self._storage = storage if storage is not None else create_storage_backend()
        self._events: list[Event] = self._storage.load()
        self.current_date = current_date or datetime.now()
        self._on_change_callback: Optional[Callable[[], None]] = None

        _debug_print(f"Store ready with {len(self._events)} events")

    # ==================== State ====================

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    def get_event(self, event_id: str) -> Optional[Event]:
        for event in self._events:
            if event.id == event_id:
                return event
        return None

    def set_on_change_callback(self, callback: Callable[[], None]) -> None:
        """Set callback to be invoked after every mutation."""
        self._on_change_callback = callback

    def _notify_change(self) -> None:
        if self._on_change_callback:
            self._on_change_callback()

    def _commit(self, events: list[Event]) -> None:
        self._events = events
        self._storage.save(events)
        self._notify_change()

    # ==================== Navigation ====================

    def set_current_date(self, value: datetime) -> None:
        self.current_date = value

    def next_month(self) -> datetime:
        self.current_date = add_months(self.current_date, 1)
        return self.current_date

    def previous_month(self) -> datetime:
        self.current_date = add_months(self.current_date, -1)
        return self.current_date

    # ==================== Mutations ====================

    def set_events(self, events: Sequence[Event]) -> None:
        """Replace the whole event list."""
        self._commit(list(events))

    def add_event(self, event: Event) -> None:
        self._commit(self._events + [event])

    def update_event(self, event: Event) -> None:
        """Replace the record with the same id. Unknown ids change nothing."""
        self._commit([event if e.id == event.id else e for e in self._events])

    def delete_event(self, target: Union[Event, str], delete_series: bool = False) -> None:
        """
        Delete an event, or its whole series.

        `target` is an Event or an event id. Passing the Event lets a
        materialized occurrence resolve to its template.

        Without delete_series only the record with exactly this id goes. If
        that record is a materialized occurrence (not stored itself), its day
        is excluded from the template instead, so only that instance vanishes.

        With delete_series the series id is the record's parent_id, or the id
        itself. The template, every occurrence pointing at it and every
        instance detached from it are removed.
        """
        if isinstance(target, Event):
            event_id = target.id
            given_parent = target.parent_id
        else:
            event_id = target
            given_parent = None

        existing = self.get_event(event_id)

        if not delete_series:
            if existing is None and given_parent:
                self._exclude_occurrence(given_parent, target.date)
                return
            self._commit([e for e in self._events if e.id != event_id])
            return

        series_id = (existing.parent_id if existing else None) or given_parent or event_id
        _debug_print(f"Deleting series {series_id}")
        self._commit([
            e for e in self._events
            if e.id != event_id
            and e.id != series_id
            and e.parent_id != series_id
            and e.detached_from != series_id
        ])

    def _exclude_occurrence(self, template_id: str, day: DayLike) -> None:
        template = self.get_event(template_id)
        if template is None:
            _debug_print(f"Cannot exclude occurrence: unknown template {template_id}")
            self._commit(list(self._events))
            return

        updated = template.copy()
        excluded_day = as_day(day)
        if excluded_day not in updated.recurrence.excluded_dates:
            updated.recurrence.excluded_dates.append(excluded_day)
        self.update_event(updated)

    def move_event(self, event: Event, new_day: DayLike) -> Optional[Event]:
        """
        Drop `event` on `new_day`, keeping its time-of-day.

        Occurrences of a series are forked into a new standalone event and the
        series is left alone. Any other record has its date changed in place;
        for a recurring template that shifts the whole series.

        Returns the record that was written, or None if nothing matched.
        """
        relocation = plan_relocation(event, new_day)

        if relocation.action == RelocationAction.DETACH:
            _debug_print(f"Detaching occurrence {event.id} to {relocation.event.date}")
            self.add_event(relocation.event)
            return relocation.event

        moved = None
        updated = []
        for e in self._events:
            if e.id == event.id:
                moved = e.copy(date=relocation.event.date)
                updated.append(moved)
            else:
                updated.append(e)
        self._commit(updated)
        return moved

    def import_events(self, events: Sequence[Event]) -> None:
        """Append externally sourced events as they are."""
        self._commit(self._events + list(events))

    # ==================== Queries ====================

    def occurrences_on_day(self, day: DayLike) -> list[Event]:
        return occurrences_on_day(self._events, day)

    def occurrences_in_range(self, start: DayLike, end: DayLike) -> OccurrenceRange:
        return occurrences_in_range(self._events, start, end)

    def find_conflicts(self, candidate: Event) -> list[Event]:
        """Conflicts of `candidate` against the projected view of its day."""
        return find_conflicts(self.occurrences_on_day(candidate.date), candidate)

    # ==================== Remote Sync ====================

    def sync_with_remote(self, adapter: RemoteCalendarAdapter) -> list[Event]:
        """
        Push all events to `adapter`, then append what it returns.

        Raises SyncError; the local list is only changed on success.
        """
        imported = sync_events(adapter, self._events)
        self.import_events(imported)
        return imported
