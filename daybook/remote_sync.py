"""
Remote calendar synchronization for Daybook.

A remote adapter moves plain Event records across the boundary to an
external calendar provider. A sync is a blocking sequence:
authenticate, push every local event, pull upcoming remote events.
There is no partial-failure recovery; anything that goes wrong surfaces as
a single SyncError and already pushed events stay pushed.
"""

import sys
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Sequence

from .models import Event


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] SYNC: {msg}", file=sys.stderr)


class SyncError(Exception):
    """Authentication, network or provider failure during a sync."""
    pass


class RemoteCalendarAdapter(ABC):
    """
    Abstract base class for remote calendar providers.

    Implementations raise SyncError on failure.
    """

    @abstractmethod
    def authenticate(self) -> None:
        """Establish an authenticated session with the provider."""
        pass

    @abstractmethod
    def export_events(self, events: Sequence[Event]) -> None:
        """Create one remote record per event. No deduplication."""
        pass

    @abstractmethod
    def import_events(self) -> list[Event]:
        """Fetch upcoming remote events as non-recurring Events."""
        pass


def sync_events(adapter: RemoteCalendarAdapter, events: Sequence[Event]) -> list[Event]:
    """
    Run one full sync against `adapter` and return the imported events.

    Raises SyncError if any step fails.
    """
    try:
        adapter.authenticate()
        _debug_print(f"Authenticated, pushing {len(events)} events")
        adapter.export_events(events)
        imported = adapter.import_events()
    except SyncError as e:
        _debug_print(f"Sync failed: {e}")
        raise
    except Exception as e:
        _debug_print(f"Sync failed: {e}")
        raise SyncError(str(e)) from e

    _debug_print(f"Imported {len(imported)} events")
    return imported
