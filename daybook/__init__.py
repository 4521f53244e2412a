"""
Daybook Calendar Core

This module provides the core functionality for calendar operations:
- Event model (models.py)
- Recurrence evaluation (recurrence.py) and occurrence projection (projection.py)
- Conflict detection (conflicts.py) and drag relocation (relocation.py)
- Event store (event_store.py) with pluggable persistence (event_storage.py)
- Remote sync (remote_sync.py, caldav_client.py) and ICS feeds (ics_subscription.py)
- Configuration parsing (config.py)
"""

from .models import Event, EventColor, RecurrenceRule, RecurrenceType, create_event
from .recurrence import occurs_on, occurrence_dates
from .projection import occurrences_in_range, occurrences_on_day, occurrence_id
from .conflicts import find_conflicts
from .event_storage import EventStorageBackend, JsonEventStorage, MemoryEventStorage
from .event_store import EventStore
from .remote_sync import RemoteCalendarAdapter, SyncError
from .config import Config

__all__ = [
    'Event',
    'EventColor',
    'RecurrenceRule',
    'RecurrenceType',
    'create_event',
    'occurs_on',
    'occurrence_dates',
    'occurrences_in_range',
    'occurrences_on_day',
    'occurrence_id',
    'find_conflicts',
    'EventStorageBackend',
    'JsonEventStorage',
    'MemoryEventStorage',
    'EventStore',
    'RemoteCalendarAdapter',
    'SyncError',
    'Config',
]
