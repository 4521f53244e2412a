from datetime import date, datetime

import pytest

from daybook.event_storage import MemoryEventStorage
from daybook.event_store import EventStore
from daybook.models import Event, RecurrenceType
from daybook.remote_sync import RemoteCalendarAdapter, SyncError


@pytest.fixture
def storage():
    return MemoryEventStorage()


@pytest.fixture
def store(storage):
    return EventStore(storage, current_date=datetime(2025, 1, 31, 12, 0))


def test_mutations_are_persisted(store, storage, make_event):
    event = make_event(datetime(2025, 1, 1, 9, 0))
    store.add_event(event)

    assert EventStore(storage).events == [event]


def test_update_replaces_matching_record_only(store, make_event):
    event = make_event(datetime(2025, 1, 1, 9, 0), event_id="a")
    store.add_event(event)

    store.update_event(event.copy(title="Renamed"))
    store.update_event(make_event(datetime(2025, 1, 2), event_id="missing"))

    assert [e.title for e in store.events] == ["Renamed"]


def test_delete_series_removes_template_and_children(store, make_event):
    template = make_event(datetime(2025, 1, 1, 9, 0), RecurrenceType.DAILY, event_id="t")
    child = make_event(datetime(2025, 1, 2, 9, 0), event_id="t-2025-01-02").copy(parent_id="t")
    other = make_event(datetime(2025, 1, 2, 9, 0), event_id="o")
    store.set_events([template, child, other])
    store.move_event(store.occurrences_on_day(date(2025, 1, 5))[0], date(2025, 1, 20))

    store.delete_event("t", delete_series=True)

    assert [e.id for e in store.events] == ["o"]


def test_delete_series_through_an_occurrence(store, make_event):
    template = make_event(datetime(2025, 1, 1, 9, 0), RecurrenceType.DAILY, event_id="t")
    store.add_event(template)
    occurrence = store.occurrences_on_day(date(2025, 1, 4))[0]

    store.delete_event(occurrence, delete_series=True)

    assert store.events == []


def test_delete_single_detached_instance_keeps_series(store, make_event):
    template = make_event(datetime(2025, 1, 1, 9, 0), RecurrenceType.DAILY, event_id="t")
    store.add_event(template)
    first = store.move_event(store.occurrences_on_day(date(2025, 1, 3))[0], date(2025, 1, 10))
    second = store.move_event(store.occurrences_on_day(date(2025, 1, 4))[0], date(2025, 1, 11))

    store.delete_event(first.id)

    assert [e.id for e in store.events] == ["t", second.id]


def test_delete_this_occurrence_only(store, make_event):
    template = make_event(datetime(2025, 1, 1, 9, 0), RecurrenceType.DAILY, event_id="t")
    store.add_event(template)
    occurrence = store.occurrences_on_day(date(2025, 1, 3))[0]

    store.delete_event(occurrence)

    assert [e.id for e in store.events] == ["t"]
    assert store.occurrences_on_day(date(2025, 1, 3)) == []
    assert [o.id for o in store.occurrences_in_range(date(2025, 1, 2), date(2025, 1, 4))] == [
        "t-2025-01-02", "t-2025-01-04",
    ]
    assert template.recurrence.excluded_dates == []


def test_moving_an_occurrence_detaches_it(store, make_event):
    template = make_event(datetime(2025, 1, 1, 9, 30), RecurrenceType.DAILY, event_id="t")
    store.add_event(template)
    occurrence = store.occurrences_on_day(date(2025, 1, 3))[0]

    detached = store.move_event(occurrence, date(2025, 2, 14))

    assert detached.date == datetime(2025, 2, 14, 9, 30)
    assert not detached.is_recurring
    assert detached.parent_id is None
    assert store.get_event("t").date == datetime(2025, 1, 1, 9, 30)
    assert [o.id for o in store.occurrences_on_day(date(2025, 1, 3))] == ["t-2025-01-03"]


def test_moving_a_template_shifts_the_series(store, make_event):
    template = make_event(datetime(2025, 1, 1, 9, 30), RecurrenceType.DAILY, event_id="t", interval=2)
    store.add_event(template)

    moved = store.move_event(template, date(2025, 1, 2))

    assert moved.date == datetime(2025, 1, 2, 9, 30)
    days = [o.date.day for o in store.occurrences_in_range(date(2025, 1, 1), date(2025, 1, 6))]
    assert days == [2, 4, 6]


def test_moving_a_detached_instance_moves_it_in_place(store, make_event):
    template = make_event(datetime(2025, 1, 1, 9, 30), RecurrenceType.DAILY, event_id="t")
    store.add_event(template)
    detached = store.move_event(store.occurrences_on_day(date(2025, 1, 3))[0], date(2025, 1, 10))

    store.move_event(detached, date(2025, 1, 12))

    assert len(store.events) == 2
    assert store.get_event(detached.id).date == datetime(2025, 1, 12, 9, 30)


def test_conflicts_include_recurring_occurrences(store, make_event):
    series = make_event(datetime(2025, 1, 1, 9, 0), RecurrenceType.WEEKLY, event_id="w")
    store.add_event(series)
    candidate = make_event(datetime(2025, 1, 8, 18, 0), event_id="new")

    conflicts = store.find_conflicts(candidate)

    assert [c.id for c in conflicts] == ["w-2025-01-08"]


def test_change_callback_and_month_navigation(store, make_event):
    calls = []
    store.set_on_change_callback(lambda: calls.append(1))
    store.add_event(make_event(datetime(2025, 1, 1)))

    assert calls == [1]
    assert store.next_month() == datetime(2025, 2, 28, 12, 0)
    assert store.previous_month() == datetime(2025, 1, 28, 12, 0)


class FakeAdapter(RemoteCalendarAdapter):
    def __init__(self, remote_events=None, fail_on=None):
        self.remote_events = remote_events or []
        self.fail_on = fail_on
        self.calls = []
        self.pushed = []

    def authenticate(self):
        self.calls.append("authenticate")
        if self.fail_on == "authenticate":
            raise SyncError("denied")

    def export_events(self, events):
        self.calls.append("export")
        for event in events:
            if self.fail_on == "export":
                raise ConnectionError("connection reset")
            self.pushed.append(event.id)

    def import_events(self):
        self.calls.append("import")
        return list(self.remote_events)


def test_sync_pushes_then_appends_imported_events(store, make_event):
    local = make_event(datetime(2025, 1, 1, 9, 0), event_id="local")
    remote = Event(id="remote-1", title="Dentist", date=datetime(2025, 3, 1, 14, 0))
    store.add_event(local)
    adapter = FakeAdapter([remote])

    imported = store.sync_with_remote(adapter)

    assert adapter.calls == ["authenticate", "export", "import"]
    assert adapter.pushed == ["local"]
    assert imported == [remote]
    assert [e.id for e in store.events] == ["local", "remote-1"]


def test_sync_failure_is_a_single_error_and_keeps_local_state(store, make_event):
    store.add_event(make_event(datetime(2025, 1, 1, 9, 0), event_id="local"))

    with pytest.raises(SyncError):
        store.sync_with_remote(FakeAdapter(fail_on="export"))
    with pytest.raises(SyncError):
        store.sync_with_remote(FakeAdapter(fail_on="authenticate"))

    assert [e.id for e in store.events] == ["local"]


def test_deleting_anchor_occurrence_hides_it_from_every_view(store, make_event):
    store.add_event(make_event(datetime(2025, 1, 1, 9, 0), RecurrenceType.DAILY, event_id="s"))
    first = next(iter(store.occurrences_in_range(date(2025, 1, 1), date(2025, 1, 2))))

    store.delete_event(first, delete_series=False)

    assert [e.id for e in store.occurrences_in_range(date(2025, 1, 1), date(2025, 1, 2))] == ["s-2025-01-02"]
    assert store.occurrences_on_day(date(2025, 1, 1)) == []
    assert [e.id for e in store.occurrences_on_day(date(2025, 1, 2))] == ["s-2025-01-02"]
    assert store.find_conflicts(make_event(datetime(2025, 1, 1, 18, 0))) == []
