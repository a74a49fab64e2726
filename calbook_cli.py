#!/usr/bin/env python3
"""
calbook - command line front end.

Loads the configuration, creates (and seeds) the configured calendars,
then runs one query and/or export against the active calendar.
"""

import sys
import argparse
from pathlib import Path

from calbook import (
    CalendarError,
    CalendarModel,
    Config,
    QueryEventRequest,
    QueryResult,
    QueryType,
)
from calbook.debug import set_debug


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="calbook - named calendars with recurring events"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="Path to configuration file (default: auto-detect)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )
    parser.add_argument(
        "--calendar",
        help="Calendar to use (default: the one marked active in the configuration)"
    )
    query = parser.add_mutually_exclusive_group()
    query.add_argument("--on", metavar="DATE", help="Print events on YYYY-MM-DD")
    query.add_argument("--from", dest="range_start", metavar="DATETIME",
                       help="Print events from YYYY-MM-DDTHH:MM (use with --to)")
    query.add_argument("--status", metavar="DATETIME",
                       help="Show busy/available at YYYY-MM-DDTHH:MM")
    parser.add_argument("--to", dest="range_end", metavar="DATETIME",
                        help="End of the --from range")
    parser.add_argument("--export", metavar="FILE",
                        help="Export the calendar to FILE (.csv, .ics or .ical)")
    args = parser.parse_args(argv)
    if (args.range_start is None) != (args.range_end is None):
        parser.error("--from and --to must be used together")
    return args


def build_model(config: Config) -> CalendarModel:
    """Create the configured calendars and seed their events."""
    model = CalendarModel(export_dir=config.export_dir)
    for calendar in config.calendars:
        model.create_calendar(calendar.name, calendar.timezone)
        model.set_active_calendar(calendar.name)
        for request in calendar.events:
            model.create_event(request)
    if config.active_calendar:
        model.set_active_calendar(config.active_calendar)
    return model


def format_result(result: QueryResult) -> str:
    """Render a query result as console text."""
    if result.query_type is QueryType.SHOW_STATUS_AT:
        return "busy" if result.busy else "available"
    if not result.events:
        return "No events found."

    lines = ["Query results:"]
    for event in result.sorted_events():
        location = f" at {event.location}" if event.location else ""
        if result.query_type is QueryType.PRINT_ON_DATE:
            lines.append(
                f"- {event.subject}: (from {event.start:%H:%M} to {event.end:%H:%M}){location}"
            )
        else:
            lines.append(
                f"- {event.subject} starting on {event.start:%Y-%m-%d} at {event.start:%H:%M}, "
                f"ending on {event.end:%Y-%m-%d} at {event.end:%H:%M}{location}"
            )
    return "\n".join(lines)


def _report(error: Exception) -> None:
    message = str(error)
    print(message if message.startswith("Error") else f"Error: {message}")


def run(args) -> int:
    set_debug(args.debug)
    try:
        config = Config.load(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        print("\nPlease create a configuration file at:")
        print(f"  {Config.get_default_config_path()}")
        return 1
    except CalendarError as e:
        print(f"Error loading configuration: {e}")
        return 1

    if config.debug:
        set_debug(True)

    try:
        model = build_model(config)
        if args.calendar:
            model.set_active_calendar(args.calendar)

        request = None
        if args.on:
            request = QueryEventRequest.on(args.on)
        elif args.range_start:
            request = QueryEventRequest.in_range(args.range_start, args.range_end)
        elif args.status:
            request = QueryEventRequest.status_at(args.status)

        if request is not None:
            print(format_result(model.query_events(request)))
        if args.export:
            print(f"Exported to {model.export_events(args.export)}")
    except CalendarError as e:
        _report(e)
        return 1
    return 0


def main():
    """Main entry point."""
    sys.exit(run(parse_args()))


if __name__ == "__main__":
    main()
