from datetime import datetime

import pytest

from daybook.models import Event, RecurrenceRule, RecurrenceType
from daybook import timezone_utils


@pytest.fixture
def make_event():
    counter = {"n": 0}

    def _make(when: datetime, kind=RecurrenceType.NONE, event_id=None, title=None, **rule):
        counter["n"] += 1
        return Event(
            id=event_id or f"evt{counter['n']}",
            title=title or f"Event {counter['n']}",
            date=when,
            recurrence=RecurrenceRule(type=kind, **rule),
        )

    return _make


@pytest.fixture(autouse=True)
def amsterdam_timezone(monkeypatch):
    monkeypatch.setattr(timezone_utils, "_local_timezone_name", "Europe/Amsterdam")
