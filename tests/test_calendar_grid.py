from datetime import date, datetime

from daybook.calendar_grid import calendar_month, search_events, week_days
from daybook.models import RecurrenceType


def test_month_grid_covers_whole_weeks(make_event):
    weekly = make_event(datetime(2025, 2, 3, 9, 0), RecurrenceType.WEEKLY, event_id="w")

    grid = calendar_month(date(2025, 2, 14), [weekly], today=date(2025, 2, 14))

    assert (grid.year, grid.month) == (2025, 2)
    assert grid.days[0].date == date(2025, 1, 26)
    assert grid.days[-1].date == date(2025, 3, 1)
    assert len(grid.weeks) == 5
    assert sum(d.is_current_month for d in grid.days) == 28
    assert [d.date for d in grid.days if d.is_today] == [date(2025, 2, 14)]
    assert [d.date.day for d in grid.days if d.events] == [3, 10, 17, 24]


def test_month_grid_with_monday_weeks():
    grid = calendar_month(date(2025, 2, 14), [], week_starts_on=1)
    assert grid.days[0].date == date(2025, 1, 27)
    assert grid.days[-1].date == date(2025, 3, 2)


def test_week_days():
    days = week_days(date(2025, 1, 1), week_starts_on=1)
    assert days[0] == date(2024, 12, 30)
    assert days[-1] == date(2025, 1, 5)


def test_search_matches_title_and_description(make_event):
    dentist = make_event(datetime(2025, 1, 1), title="Dentist")
    lunch = make_event(datetime(2025, 1, 1), title="Lunch")
    lunch.description = "with the DENTIST team"
    gym = make_event(datetime(2025, 1, 1), title="Gym")

    assert search_events([dentist, lunch, gym], "dentist") == [dentist, lunch]
    assert search_events([dentist, gym], "") == [dentist, gym]
