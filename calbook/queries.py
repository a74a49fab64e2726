"""
Read-only event queries: events on a date, in a range, or active at an instant.
"""

from datetime import datetime, timedelta, tzinfo
from typing import Callable, Collection

from .commands import QueryEventRequest, QueryResult, QueryType
from .errors import InvalidArgumentError
from .interval_tree import EventIntervalTree
from .model import Event
from .timezone_utils import parse_date, parse_datetime, start_of_day


def events_overlapping(tree: EventIntervalTree, start: datetime, end: datetime) -> set[Event]:
    """Events sharing time with the half-open window [start, end)."""
    return {e for e in tree.overlapping(start, end) if e.start < end and e.end > start}


def events_active_at(tree: EventIntervalTree, instant: datetime) -> set[Event]:
    """Events with start <= instant < end."""
    return {e for e in tree.covering(instant) if e.start <= instant < e.end}


def _print_on_date(request: QueryEventRequest, tree: EventIntervalTree,
                   timezone: tzinfo) -> set[Event]:
    day = parse_date(request.on_date)
    return events_overlapping(
        tree,
        start_of_day(day, timezone),
        start_of_day(day + timedelta(days=1), timezone),
    )


def _print_in_range(request: QueryEventRequest, tree: EventIntervalTree,
                    timezone: tzinfo) -> set[Event]:
    if not request.range_start or not request.range_end:
        raise InvalidArgumentError("Invalid query: missing start or end time.")
    start = parse_datetime(request.range_start, timezone)
    end = parse_datetime(request.range_end, timezone)
    if start > end:
        raise InvalidArgumentError("Error: Start time must be before end time.")
    return events_overlapping(tree, start, end)


def _show_status_at(request: QueryEventRequest, tree: EventIntervalTree,
                    timezone: tzinfo) -> set[Event]:
    return events_active_at(tree, parse_datetime(request.at, timezone))


QUERY_STRATEGIES: dict[QueryType, Callable[..., set[Event]]] = {
    QueryType.PRINT_ON_DATE: _print_on_date,
    QueryType.PRINT_IN_RANGE: _print_in_range,
    QueryType.SHOW_STATUS_AT: _show_status_at,
}


def find(request: QueryEventRequest, events: Collection[Event], timezone: tzinfo) -> QueryResult:
    """Run a query against a calendar's events."""
    strategy = QUERY_STRATEGIES.get(request.type)
    if strategy is None:
        raise InvalidArgumentError(f"Unsupported query: {request.type}")
    tree = EventIntervalTree(events)
    return QueryResult(frozenset(strategy(request, tree, timezone)), request.type)
