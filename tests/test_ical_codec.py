from datetime import datetime, timedelta

from icalendar import Calendar

from daybook.ical_codec import event_to_vevent, events_to_ical, parse_ical_events
from daybook.models import Event, RecurrenceRule, RecurrenceType


FEED = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Example//Feed//EN
BEGIN:VEVENT
UID:remote-1
SUMMARY:Board meeting
DESCRIPTION:Quarterly review
DTSTART:20250310T130000Z
DTEND:20250310T140000Z
RRULE:FREQ=WEEKLY
END:VEVENT
BEGIN:VEVENT
UID:holiday
SUMMARY:King's Day
DTSTART;VALUE=DATE:20250427
END:VEVENT
BEGIN:VEVENT
UID:broken
SUMMARY:No start
END:VEVENT
END:VCALENDAR
"""


def test_vevent_is_one_hour_in_utc():
    event = Event(id="e1", title="Dinner", date=datetime(2025, 1, 15, 19, 0), description="At home")

    vevent = event_to_vevent(event)

    start = vevent.get("DTSTART").dt
    assert start.utcoffset() == timedelta(0)
    assert start.replace(tzinfo=None) == datetime(2025, 1, 15, 18, 0)
    assert vevent.get("DTEND").dt - start == timedelta(hours=1)
    assert str(vevent.get("SUMMARY")) == "Dinner"
    assert str(vevent.get("UID")) == "e1"


def test_feed_events_become_single_local_events():
    events = parse_ical_events(FEED)

    assert [e.id for e in events] == ["remote-1", "holiday"]
    board, holiday = events
    assert board.date == datetime(2025, 3, 10, 14, 0)
    assert board.description == "Quarterly review"
    assert board.recurrence.type == RecurrenceType.NONE
    assert holiday.date == datetime(2025, 4, 27, 0, 0)


def test_export_contains_one_vevent_per_event():
    events = [
        Event(id="a", title="A", date=datetime(2025, 1, 1, 9, 0)),
        Event(id="b", title="B", date=datetime(2025, 1, 2, 9, 0),
              recurrence=RecurrenceRule(RecurrenceType.DAILY)),
    ]

    calendar = Calendar.from_ical(events_to_ical(events))

    assert [str(c.get("UID")) for c in calendar.walk("VEVENT")] == ["a", "b"]
