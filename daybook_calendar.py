#!/usr/bin/env python3
"""
Daybook - a local calendar with recurring events and CalDAV sync.

This is the main entry point for the application.
"""

import sys
import argparse
from datetime import date, datetime, time as dt_time
from pathlib import Path
from typing import Optional

from daybook.calendar_grid import calendar_month
from daybook.caldav_client import CalDAVAdapter
from daybook.config import Config
from daybook.event_storage import JsonEventStorage
from daybook.event_store import EventStore
from daybook.ical_codec import events_to_ical
from daybook.ics_subscription import ICSSubscription
from daybook.models import (
    Event, EventColor, RecurrenceRule, RecurrenceType, create_event,
    describe_recurrence,
)
from daybook.projection import materialize
from daybook.recurrence import occurs_on
from daybook.remote_sync import SyncError
from daybook.timezone_utils import set_timezone


EXAMPLE_CONFIG = """
[General]
timezone = "Europe/Amsterdam"
week_starts_on = 1
password_program = "/usr/bin/pass"

[Remote]
url = "https://nextcloud.example.com/remote.php/dav"
username = "your_username"
password_key = "nextcloud/password"
calendar = "Personal"

[Subscription.Holidays]
url = "https://example.com/holidays.ics"
color = "green"
"""


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Daybook - a local calendar with recurring events"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to configuration file (default: auto-detect)"
    )
    parser.add_argument(
        "--storage-dir",
        type=Path,
        help="Override the event storage directory"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Create an event")
    add.add_argument("title")
    add.add_argument("--date", type=date.fromisoformat, default=date.today())
    add.add_argument("--time", type=dt_time.fromisoformat, default=dt_time(12, 0))
    add.add_argument("--description", default="")
    add.add_argument("--color", choices=[c.value for c in EventColor])
    add.add_argument("--repeat", choices=[t.value for t in RecurrenceType], default="none")
    add.add_argument("--interval", type=int, default=1)
    add.add_argument("--weekdays", default="", help="Comma-separated, 0=Sunday .. 6=Saturday")
    add.add_argument("--until", type=date.fromisoformat)
    add.add_argument("--count", type=int)

    lst = sub.add_parser("list", help="List occurrences on a day or in a range")
    lst.add_argument("day", nargs="?", type=date.fromisoformat)
    lst.add_argument("--to", type=date.fromisoformat, help="End of range (inclusive)")

    month = sub.add_parser("month", help="Print a month grid")
    month.add_argument("month", nargs="?", help="YYYY-MM (default: current month)")

    delete = sub.add_parser("delete", help="Delete an event or occurrence")
    delete.add_argument("id")
    delete.add_argument("--series", action="store_true", help="Delete the whole series")

    move = sub.add_parser("move", help="Move an event or occurrence to another day")
    move.add_argument("id")
    move.add_argument("day", type=date.fromisoformat)

    conflicts = sub.add_parser("conflicts", help="Show events on the same day")
    conflicts.add_argument("id")

    sub.add_parser("sync", help="Push events to and pull events from the remote calendar")
    sub.add_parser("subscribe", help="Import events from configured ICS feeds")

    export = sub.add_parser("export", help="Write all events to an ICS file")
    export.add_argument("path", type=Path)

    return parser.parse_args(argv)


def load_config(path: Optional[Path]) -> Config:
    if path is not None:
        return Config.load(path)
    try:
        return Config.load()
    except FileNotFoundError:
        return Config.default()


def resolve_event(store: EventStore, event_id: str) -> Optional[Event]:
    """
    Find a stored event, or rebuild a materialized occurrence from its
    synthetic id ('<template id>-YYYY-MM-DD').
    """
    event = store.get_event(event_id)
    if event is not None:
        return event

    template_id, sep, day_text = event_id[:-11], event_id[-11:-10], event_id[-10:]
    if sep != "-":
        return None
    try:
        day = date.fromisoformat(day_text)
    except ValueError:
        return None
    template = store.get_event(template_id)
    if template is None or not template.is_recurring or not occurs_on(template, day):
        return None
    return materialize(template, day)


def format_event(event: Event) -> str:
    line = f"{event.date:%Y-%m-%d %H:%M}  {event.title}  [{event.id}]"
    recurrence = describe_recurrence(event.recurrence)
    if recurrence:
        line += f"  ({recurrence})"
    return line


def cmd_add(store: EventStore, config: Config, args) -> int:
    weekdays = [int(w) for w in args.weekdays.split(",") if w.strip()]
    recurrence = RecurrenceRule(
        type=RecurrenceType(args.repeat),
        interval=args.interval,
        weekdays=weekdays,
        end_date=datetime.combine(args.until, dt_time(0, 0)) if args.until else None,
        occurrences=args.count,
    )
    event = create_event(
        title=args.title,
        date=datetime.combine(args.date, args.time),
        description=args.description,
        color=EventColor(args.color) if args.color else config.default_color,
        recurrence=recurrence,
    )

    for other in store.find_conflicts(event):
        print(f"Warning: conflicts with {format_event(other)}")

    store.add_event(event)
    print(f"Created {format_event(event)}")
    return 0


def cmd_list(store: EventStore, config: Config, args) -> int:
    day = args.day or date.today()
    if args.to is None:
        events = store.occurrences_on_day(day)
    else:
        single = [
            e for e in store.events
            if not e.is_recurring and day <= e.date.date() <= args.to
        ]
        events = sorted(single + list(store.occurrences_in_range(day, args.to)), key=lambda e: e.date)

    if not events:
        print("No events")
    for event in events:
        print(format_event(event))
    return 0


def cmd_month(store: EventStore, config: Config, args) -> int:
    if args.month:
        year, month = (int(part) for part in args.month.split("-"))
        day = date(year, month, 1)
    else:
        day = store.current_date.date()

    grid = calendar_month(day, store.events, week_starts_on=config.week_starts_on)
    print(f"{grid.year}-{grid.month:02d}")
    for week in grid.weeks:
        cells = []
        for cell in week:
            label = f"{cell.date.day:2d}" if cell.is_current_month else "  "
            marker = "*" if cell.events else " "
            cells.append(f"{label}{marker}")
        print(" ".join(cells))
    return 0


def cmd_delete(store: EventStore, config: Config, args) -> int:
    event = resolve_event(store, args.id)
    if event is None:
        print(f"Error: no such event: {args.id}")
        return 1
    store.delete_event(event, delete_series=args.series)
    return 0


def cmd_move(store: EventStore, config: Config, args) -> int:
    event = resolve_event(store, args.id)
    if event is None:
        print(f"Error: no such event: {args.id}")
        return 1
    written = store.move_event(event, args.day)
    if written is not None:
        print(f"Moved to {format_event(written)}")
    return 0


def cmd_conflicts(store: EventStore, config: Config, args) -> int:
    event = resolve_event(store, args.id)
    if event is None:
        print(f"Error: no such event: {args.id}")
        return 1
    for other in store.find_conflicts(event):
        print(format_event(other))
    return 0


def cmd_sync(store: EventStore, config: Config, args) -> int:
    account = config.remote
    if account is None:
        print("Error: no [Remote] section configured")
        return 1

    try:
        adapter = CalDAVAdapter(
            url=account.url,
            username=account.username,
            password=account.get_password(config.password_program),
            calendar_name=account.calendar,
            import_limit=account.import_limit,
        )
        imported = store.sync_with_remote(adapter)
    except (SyncError, RuntimeError) as e:
        print(f"Sync failed: {e}")
        return 1

    print(f"Synced, imported {len(imported)} events")
    return 0


def cmd_subscribe(store: EventStore, config: Config, args) -> int:
    total = 0
    for sub_config in config.subscriptions:
        subscription = ICSSubscription(sub_config.name, sub_config.url, sub_config.color)
        events = subscription.import_events()
        if subscription.error:
            print(f"{sub_config.name}: {subscription.error}")
        total += len(events)
        store.import_events(events)
    print(f"Imported {total} events")
    return 0


def cmd_export(store: EventStore, config: Config, args) -> int:
    args.path.write_text(events_to_ical(store.events), encoding="utf-8")
    print(f"Exported {len(store.events)} events to {args.path}")
    return 0


COMMANDS = {
    "add": cmd_add,
    "list": cmd_list,
    "month": cmd_month,
    "delete": cmd_delete,
    "move": cmd_move,
    "conflicts": cmd_conflicts,
    "sync": cmd_sync,
    "subscribe": cmd_subscribe,
    "export": cmd_export,
}


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
        set_timezone(config.timezone)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        print("\nExample configuration:")
        print(EXAMPLE_CONFIG)
        return 1
    except Exception as e:
        print(f"Error loading configuration: {e}")
        return 1

    storage_dir = args.storage_dir or config.storage_dir
    store = EventStore(JsonEventStorage(storage_dir))
    return COMMANDS[args.command](store, config, args)


if __name__ == "__main__":
    sys.exit(main())
