"""
Event data model for Daybook.

An Event is the persisted unit: either a single appointment or the template
of a recurring series. Materialized occurrences share the same shape but carry
a parent_id pointing back at their template.
"""

import sys
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, date
from enum import Enum
from typing import Optional, Union


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] MODEL: {msg}", file=sys.stderr)


class EventColor(str, Enum):
    """Display tags. Purely cosmetic, ignored by the recurrence engine."""
    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    RED = "red"
    YELLOW = "yellow"
    GRAY = "gray"


class RecurrenceType(str, Enum):
    """Kinds of recurrence rules."""
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"  # every N days


@dataclass
class RecurrenceRule:
    """
    Recurrence pattern attached to an event.

    `type` is normally a RecurrenceType; an unrecognized value read from
    storage is kept as a plain string and never produces occurrences.
    """
    type: Union[RecurrenceType, str] = RecurrenceType.NONE
    interval: int = 1
    weekdays: list[int] = field(default_factory=list)  # 0=Sunday .. 6=Saturday
    end_date: Optional[datetime] = None  # inclusive cutoff day
    occurrences: Optional[int] = None  # count cutoff, None for no limit
    excluded_dates: list[date] = field(default_factory=list)

    @property
    def is_recurring(self) -> bool:
        return self.type != RecurrenceType.NONE

    @property
    def count_limit(self) -> Optional[int]:
        """Occurrence count cutoff, None when unset or not positive."""
        if not self.occurrences or self.occurrences < 1:
            return None
        return self.occurrences

    @property
    def step(self) -> int:
        """Interval normalized to a positive step."""
        if not self.interval or self.interval < 1:
            return 1
        return self.interval

    def to_dict(self) -> dict:
        kind = self.type.value if isinstance(self.type, RecurrenceType) else self.type
        return {
            "type": kind,
            "interval": self.interval,
            "weekdays": list(self.weekdays),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "occurrences": self.occurrences,
            "excluded_dates": [d.isoformat() for d in self.excluded_dates],
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'RecurrenceRule':
        if not data:
            return cls()

        raw_type = data.get("type", "none")
        try:
            kind: Union[RecurrenceType, str] = RecurrenceType(raw_type)
        except ValueError:
            _debug_print(f"Unknown recurrence type {raw_type!r}, event will not recur")
            kind = str(raw_type)

        end_date = None
        if data.get("end_date"):
            end_date = datetime.fromisoformat(data["end_date"])

        return cls(
            type=kind,
            interval=data.get("interval") or 1,
            weekdays=list(data.get("weekdays") or []),
            end_date=end_date,
            occurrences=data.get("occurrences"),
            excluded_dates=[date.fromisoformat(d) for d in data.get("excluded_dates") or []],
        )


@dataclass
class Event:
    """
    A calendar event.

    Templates have no parent_id. Occurrences materialized from a recurring
    template carry parent_id = template id and are never persisted.
    Instances forked off a series by a drag keep the template id in
    detached_from so the series can still be purged as a whole.
    """
    id: str
    title: str
    date: datetime
    color: EventColor = EventColor.BLUE
    description: str = ""
    recurrence: RecurrenceRule = field(default_factory=RecurrenceRule)
    end_date: Optional[datetime] = None  # reserved, not used by recurrence math
    parent_id: Optional[str] = None
    detached_from: Optional[str] = None

    @property
    def is_recurring(self) -> bool:
        return self.recurrence.is_recurring

    @property
    def is_occurrence(self) -> bool:
        return self.parent_id is not None

    def copy(self, **changes) -> 'Event':
        """Return a copy with an independent recurrence rule."""
        changes.setdefault("recurrence", replace(
            self.recurrence,
            weekdays=list(self.recurrence.weekdays),
            excluded_dates=list(self.recurrence.excluded_dates),
        ))
        return replace(self, **changes)

    def to_dict(self) -> dict:
        color = self.color.value if isinstance(self.color, EventColor) else self.color
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "description": self.description,
            "color": color,
            "recurrence": self.recurrence.to_dict(),
            "parent_id": self.parent_id,
            "detached_from": self.detached_from,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Event':
        end_date = None
        if data.get("end_date"):
            end_date = datetime.fromisoformat(data["end_date"])

        try:
            color = EventColor(data.get("color", "blue"))
        except ValueError:
            color = EventColor.BLUE

        return cls(
            id=data["id"],
            title=data.get("title", ""),
            date=datetime.fromisoformat(data["date"]),
            end_date=end_date,
            description=data.get("description") or "",
            color=color,
            recurrence=RecurrenceRule.from_dict(data.get("recurrence")),
            parent_id=data.get("parent_id"),
            detached_from=data.get("detached_from"),
        )

    def __repr__(self):
        return f"Event(id={self.id!r}, title={self.title!r}, date={self.date})"


def generate_id() -> str:
    return str(uuid.uuid4())


def create_event(
    title: str = "",
    date: Optional[datetime] = None,
    description: str = "",
    color: EventColor = EventColor.BLUE,
    recurrence: Optional[RecurrenceRule] = None,
    end_date: Optional[datetime] = None,
) -> Event:
    """
    Create a new template event with a fresh id.

    Missing values fall back to the form defaults: an untitled event,
    now, blue, no recurrence.
    """
    return Event(
        id=generate_id(),
        title=title or "Untitled Event",
        date=date or datetime.now().replace(microsecond=0),
        end_date=end_date,
        description=description or "",
        color=color or EventColor.BLUE,
        recurrence=recurrence or RecurrenceRule(),
    )


def describe_recurrence(rule: Optional[RecurrenceRule]) -> str:
    """Short human-readable summary of a recurrence rule."""
    if rule is None or not rule.is_recurring:
        return ""

    n = rule.step
    if rule.type == RecurrenceType.DAILY:
        return "Daily" if n == 1 else f"Every {n} days"
    if rule.type == RecurrenceType.WEEKLY:
        return "Weekly" if n == 1 else f"Every {n} weeks"
    if rule.type == RecurrenceType.MONTHLY:
        return "Monthly" if n == 1 else f"Every {n} months"
    if rule.type == RecurrenceType.CUSTOM:
        return f"Custom (every {n} days)"
    return ""
