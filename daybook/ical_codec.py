"""
Mapping between Daybook events and iCalendar VEVENT components.

Only the flat shape crosses this boundary: remote recurrence rules are not
interpreted and every imported event is non-recurring.
"""

from datetime import datetime, date, timedelta
from typing import Optional, Sequence

import pytz
from icalendar import Calendar as ICalCalendar, Event as ICalEvent

from .models import Event, EventColor, RecurrenceRule, generate_id
from .timezone_utils import local_naive_to_utc, utc_to_local_naive


PRODID = '-//Daybook//daybook//'
DEFAULT_DURATION = timedelta(hours=1)


def new_calendar() -> ICalCalendar:
    vcal = ICalCalendar()
    vcal.add('prodid', PRODID)
    vcal.add('version', '2.0')
    return vcal


def event_to_vevent(event: Event, duration: timedelta = DEFAULT_DURATION) -> ICalEvent:
    """Build a VEVENT starting at the event's date, `duration` long, in UTC."""
    start = local_naive_to_utc(event.date)

    vevent = ICalEvent()
    vevent.add('uid', event.id)
    vevent.add('summary', event.title)
    vevent.add('dtstamp', datetime.now(pytz.UTC))
    vevent.add('dtstart', start)
    vevent.add('dtend', start + duration)
    if event.description:
        vevent.add('description', event.description)
    return vevent


def _to_local(value) -> datetime:
    if isinstance(value, date) and not isinstance(value, datetime):
        # All-day event - midnight local time
        return datetime.combine(value, datetime.min.time())
    return utc_to_local_naive(value)


def vevent_to_event(component) -> Optional[Event]:
    """
    Map a VEVENT to a non-recurring Event.

    Components without a DTSTART cannot be placed on the calendar and map
    to None.
    """
    dtstart = component.get('DTSTART')
    if dtstart is None:
        return None

    uid = component.get('UID')
    summary = component.get('SUMMARY')
    description = component.get('DESCRIPTION')

    return Event(
        id=str(uid) if uid else generate_id(),
        title=str(summary) if summary else 'Untitled Event',
        date=_to_local(dtstart.dt),
        description=str(description) if description else '',
        color=EventColor.BLUE,
        recurrence=RecurrenceRule(),
    )


def parse_ical_events(ical_text: str) -> list[Event]:
    """Parse VCALENDAR text into Events, skipping unplaceable components."""
    vcal = ICalCalendar.from_ical(ical_text)
    events = []
    for component in vcal.walk('VEVENT'):
        event = vevent_to_event(component)
        if event is not None:
            events.append(event)
    return events


def events_to_ical(events: Sequence[Event]) -> str:
    """Serialize events into a single VCALENDAR document."""
    vcal = new_calendar()
    for event in events:
        vcal.add_component(event_to_vevent(event))
    return vcal.to_ical().decode('utf-8')
