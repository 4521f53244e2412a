"""
Drag relocation policy.

Decides what dropping an event on another day means. Occurrences of a
series (anything carrying a parent_id) are forked into a new standalone
event so that the series itself stays put. Everything else is moved in place,
which for a recurring template shifts the whole series.
"""

from dataclasses import dataclass
from enum import Enum

from .date_utils import DayLike, at_time_of
from .models import Event, RecurrenceRule, generate_id


class RelocationAction(Enum):
    MOVE = "move"      # update the record with the same id
    DETACH = "detach"  # add a new standalone record


@dataclass
class Relocation:
    action: RelocationAction
    event: Event


def plan_relocation(event: Event, new_day: DayLike) -> Relocation:
    """
    Work out the record to write when `event` is dropped on `new_day`.

    The time of day is kept in both cases.
    """
    new_date = at_time_of(new_day, event.date)

    if event.parent_id:
        detached = Event(
            id=generate_id(),
            title=event.title,
            date=new_date,
            description=event.description,
            color=event.color,
            recurrence=RecurrenceRule(),
            detached_from=event.parent_id,
        )
        return Relocation(RelocationAction.DETACH, detached)

    return Relocation(RelocationAction.MOVE, event.copy(date=new_date))
