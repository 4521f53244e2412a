"""
ICS Subscription handler for read-only calendar feeds.

Fetches a published VCALENDAR and maps its events into Daybook events so
they can be appended to the store. Feed recurrence rules are not expanded.
"""

import hashlib
import sys
from datetime import datetime
from typing import Optional

import pytz
import requests

from .ical_codec import parse_ical_events
from .models import Event, EventColor


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] ICS: {msg}", file=sys.stderr)


class ICSSubscription:
    """Handler for a single ICS calendar feed."""

    def __init__(self, name: str, url: str, color: EventColor = EventColor.GREEN):
        """
        Args:
            name: Display name for the subscription
            url: URL to fetch the ICS file from
            color: Color given to imported events
        """
        self.name = name
        self.url = url
        self.color = color
        self.id = self._generate_id(url)

        self._raw_data: Optional[str] = None
        self._last_fetch: Optional[datetime] = None
        self._error: Optional[str] = None

    @staticmethod
    def _generate_id(url: str) -> str:
        """Generate a unique ID from the URL."""
        return hashlib.md5(url.encode()).hexdigest()[:12]

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def last_fetch(self) -> Optional[datetime]:
        return self._last_fetch

    def fetch(self, timeout: int = 30) -> bool:
        """
        Fetch the ICS file from the URL.

        Returns:
            True if successful, False otherwise. The reason is kept in `error`.
        """
        try:
            response = requests.get(
                self.url,
                timeout=timeout,
                headers={
                    'User-Agent': 'Daybook/1.0',
                    'Accept': 'text/calendar'
                }
            )
            response.raise_for_status()

            response.encoding = 'utf-8'
            self._raw_data = response.text
            self._last_fetch = datetime.now(pytz.UTC)
            self._error = None
            return True

        except requests.RequestException as e:
            self._error = f"Network error: {e}"
            _debug_print(f"{self.name}: {self._error}")
            return False

    def import_events(self) -> list[Event]:
        """
        Fetch the feed and return its events.

        Ids are prefixed with the subscription id so that feeds cannot
        collide with local templates. A failed fetch or parse yields no events.
        """
        if not self.fetch():
            return []

        try:
            events = parse_ical_events(self._raw_data)
        except ValueError as e:
            self._error = f"Parse error: {e}"
            _debug_print(f"{self.name}: {self._error}")
            return []

        for event in events:
            event.id = f"{self.id}:{event.id}"
            event.color = self.color

        _debug_print(f"{self.name}: imported {len(events)} events")
        return events
