"""
Same-day conflict detection.

Two events conflict when they fall on the same calendar day, whatever their
times. Callers that want recurring series taken into account pass the
projected view of that day rather than the raw templates.
"""

from typing import Iterable

from .date_utils import is_same_day
from .models import Event


def find_conflicts(events: Iterable[Event], candidate: Event) -> list[Event]:
    """Every event sharing the candidate's calendar day, except the candidate itself."""
    return [
        e for e in events
        if e.id != candidate.id and is_same_day(e.date, candidate.date)
    ]
