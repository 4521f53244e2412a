"""
Persistent Event Storage for Daybook.

Abstract base class and implementations for storing the flat event list.
Storage problems are logged and swallowed: a failed load yields no events
and a failed save leaves the in-memory state authoritative.
"""

import json
import os
import sys
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from .models import Event


EVENTS_STORAGE_KEY = "daybook.calendar_events"


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] STORAGE: {msg}", file=sys.stderr)


class EventStorageBackend(ABC):
    """
    Abstract base class for event storage backends.

    Implementations must never raise from load() or save().
    """

    @abstractmethod
    def load(self) -> list[Event]:
        """Load all persisted events, or an empty list."""
        pass

    @abstractmethod
    def save(self, events: Sequence[Event]) -> None:
        """Replace the persisted events with `events`."""
        pass


class MemoryEventStorage(EventStorageBackend):
    """Keeps the serialized events in memory. Used for throwaway sessions."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def load(self) -> list[Event]:
        raw = self._data.get(EVENTS_STORAGE_KEY)
        if raw is None:
            return []
        try:
            return [Event.from_dict(item) for item in json.loads(raw)]
        except Exception as e:
            _debug_print(f"Error loading events from memory: {e}")
            return []

    def save(self, events: Sequence[Event]) -> None:
        try:
            self._data[EVENTS_STORAGE_KEY] = json.dumps([e.to_dict() for e in events])
        except Exception as e:
            _debug_print(f"Error saving events to memory: {e}")


class JsonEventStorage(EventStorageBackend):
    """
    JSON file-based event storage.

    Structure:
    - {storage_dir}/calendar_events.json - {"daybook.calendar_events": [...], "updated": ...}
    """

    def __init__(self, storage_dir: Path):
        self.storage_dir = Path(storage_dir)
        self.events_file = self.storage_dir / "calendar_events.json"
        _debug_print(f"Initialized JSON storage at {self.storage_dir}")

    def load(self) -> list[Event]:
        if not self.events_file.exists():
            return []

        try:
            with open(self.events_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            items = data.get(EVENTS_STORAGE_KEY, [])
        except Exception as e:
            _debug_print(f"Error loading events from {self.events_file}: {e}")
            return []

        if not isinstance(items, list):
            _debug_print(f"Ignoring malformed event list in {self.events_file}")
            return []

        events = []
        for item in items:
            try:
                events.append(Event.from_dict(item))
            except Exception as e:
                _debug_print(f"Error loading event: {e}")

        _debug_print(f"Loaded {len(events)} events")
        return events

    def save(self, events: Sequence[Event]) -> None:
        data = {
            "updated": datetime.now().isoformat(),
            EVENTS_STORAGE_KEY: [e.to_dict() for e in events],
        }

        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            with open(self.events_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            _debug_print(f"Saved {len(events)} events")
        except Exception as e:
            _debug_print(f"Error saving events to {self.events_file}: {e}")


def get_default_storage_dir() -> Path:
    """Get the default storage directory respecting XDG."""
    xdg_data = os.environ.get('XDG_DATA_HOME', os.path.expanduser('~/.local/share'))
    return Path(xdg_data) / 'daybook'


def create_storage_backend(storage_dir: Optional[Path] = None) -> EventStorageBackend:
    """Factory function to create a storage backend."""
    if storage_dir is None:
        storage_dir = get_default_storage_dir()

    return JsonEventStorage(storage_dir)
