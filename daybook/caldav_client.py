"""
CalDAV remote adapter for Daybook.

Pushes local events to a CalDAV calendar and pulls upcoming events back.
Events are exported as plain one-hour VEVENTs; nothing is deduplicated, so
every sync creates a fresh remote copy of each local event.
"""

import sys
from datetime import datetime, timedelta
from typing import Optional, Sequence

import caldav
import pytz

from .ical_codec import event_to_vevent, new_calendar, parse_ical_events
from .models import Event
from .remote_sync import RemoteCalendarAdapter, SyncError


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] CALDAV: {msg}", file=sys.stderr)


class CalDAVAdapter(RemoteCalendarAdapter):
    """Remote adapter talking to a single calendar on a CalDAV server."""

    IMPORT_WINDOW = timedelta(days=365)

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        calendar_name: Optional[str] = None,
        import_limit: int = 100,
    ):
        """
        Args:
            url: CalDAV endpoint (e.g. https://nextcloud.example.com/remote.php/dav)
            username: Account user name
            password: Account password or app token
            calendar_name: Display name of the target calendar, first one if None
            import_limit: Maximum number of events returned by import_events()
        """
        self.url = url.rstrip('/')
        self.username = username
        self.password = password
        self.calendar_name = calendar_name
        self.import_limit = import_limit

        self._client: Optional[caldav.DAVClient] = None
        self._calendar: Optional[caldav.Calendar] = None

    def authenticate(self) -> None:
        """Connect and resolve the target calendar."""
        try:
            self._client = caldav.DAVClient(
                url=self.url,
                username=self.username,
                password=self.password
            )
            principal = self._client.principal()
            calendars = principal.calendars()
        except Exception as e:
            raise SyncError(f"Failed to connect to CalDAV server {self.url}: {e}") from e

        self._calendar = self._select_calendar(calendars)
        _debug_print(f"Connected to {self.url}, calendar {self._calendar.name!r}")

    def _select_calendar(self, calendars) -> caldav.Calendar:
        if not calendars:
            raise SyncError(f"No calendars available for {self.username}")
        if self.calendar_name is None:
            return calendars[0]
        for cal in calendars:
            if cal.name == self.calendar_name:
                return cal
        raise SyncError(f"Calendar not found: {self.calendar_name}")

    def _require_calendar(self) -> caldav.Calendar:
        if self._calendar is None:
            raise SyncError("Not authenticated")
        return self._calendar

    def export_events(self, events: Sequence[Event]) -> None:
        calendar = self._require_calendar()

        for event in events:
            vcal = new_calendar()
            vcal.add_component(event_to_vevent(event))
            try:
                calendar.save_event(vcal.to_ical().decode('utf-8'))
            except Exception as e:
                raise SyncError(f"Error saving event {event.id}: {e}") from e

        _debug_print(f"Exported {len(events)} events")

    def import_events(self) -> list[Event]:
        calendar = self._require_calendar()
        start = datetime.now(pytz.UTC)

        try:
            results = calendar.search(
                start=start,
                end=start + self.IMPORT_WINDOW,
                event=True,
                expand=False
            )
        except Exception as e:
            raise SyncError(f"Error fetching events: {e}") from e

        events = []
        for caldav_event in results:
            try:
                events.extend(parse_ical_events(caldav_event.data))
            except Exception as e:
                _debug_print(f"Skipping unparsable CalDAV event: {e}")

        events.sort(key=lambda e: e.date)
        return events[:self.import_limit]
