from datetime import date, datetime

from daybook.models import RecurrenceType
from daybook.projection import materialize
from daybook.relocation import RelocationAction, plan_relocation


def test_occurrence_is_detached_into_new_event(make_event):
    series = make_event(datetime(2025, 1, 1, 9, 15), RecurrenceType.DAILY, event_id="s")
    occurrence = materialize(series, date(2025, 1, 3))

    plan = plan_relocation(occurrence, date(2025, 1, 10))

    assert plan.action == RelocationAction.DETACH
    assert plan.event.id not in ("s", occurrence.id)
    assert plan.event.date == datetime(2025, 1, 10, 9, 15)
    assert plan.event.parent_id is None
    assert plan.event.detached_from == "s"
    assert not plan.event.is_recurring


def test_template_is_moved_in_place(make_event):
    series = make_event(datetime(2025, 1, 1, 9, 15), RecurrenceType.WEEKLY, event_id="s")

    plan = plan_relocation(series, datetime(2025, 1, 6, 0, 0))

    assert plan.action == RelocationAction.MOVE
    assert plan.event.id == "s"
    assert plan.event.date == datetime(2025, 1, 6, 9, 15)
    assert series.date == datetime(2025, 1, 1, 9, 15)
