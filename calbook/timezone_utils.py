"""
Timezone utilities for calbook.

Events carry timezone-aware datetimes in the zone of their calendar.
All zones are pytz zones, so wall-clock values must go through
localize() and exact-duration arithmetic must be normalized afterwards;
the helpers here do both so the engines never touch tzinfo directly.
"""

from datetime import datetime, date, timedelta, tzinfo

import pytz

from .errors import InvalidArgumentError


DATETIME_FORMAT = "%Y-%m-%dT%H:%M"
DATE_FORMAT = "%Y-%m-%d"


def get_timezone(zone_name: str) -> tzinfo:
    """
    Resolve an IANA zone id to a pytz timezone.

    Raises:
        InvalidArgumentError: if the id is not a known zone.
    """
    if not zone_name:
        raise InvalidArgumentError("Error: Invalid Time Zone ''.")
    try:
        return pytz.timezone(zone_name)
    except pytz.UnknownTimeZoneError:
        raise InvalidArgumentError(f"Error: Invalid Time Zone '{zone_name}'.")


def zone_name(tz: tzinfo) -> str:
    """Get the IANA id of a pytz zone (or of an aware datetime's tzinfo)."""
    return getattr(tz, 'zone', None) or str(tz)


def zone_of(dt: datetime) -> tzinfo:
    """Get the full pytz zone an aware datetime was localized in."""
    return pytz.timezone(zone_name(dt.tzinfo))


def localize(naive: datetime, tz: tzinfo) -> datetime:
    """
    Attach a zone to a wall-clock datetime.

    Times that fall into a DST gap are moved forward by the gap length;
    ambiguous times resolve to the earlier offset.
    """
    try:
        return tz.localize(naive, is_dst=None)
    except pytz.AmbiguousTimeError:
        return tz.localize(naive, is_dst=True)
    except pytz.NonExistentTimeError:
        return tz.normalize(tz.localize(naive, is_dst=False))


def at_time(day: date, hour: int, minute: int, tz: tzinfo) -> datetime:
    """Build an aware datetime for a wall-clock time on a given date."""
    return localize(datetime(day.year, day.month, day.day, hour, minute), tz)


def start_of_day(day: date, tz: tzinfo) -> datetime:
    return at_time(day, 0, 0, tz)


def to_zone(dt: datetime, tz: tzinfo) -> datetime:
    """Reproject an aware datetime into another zone (same instant)."""
    return dt.astimezone(tz)


def shift(dt: datetime, delta: timedelta) -> datetime:
    """Move an aware datetime by an exact duration, keeping its zone."""
    return zone_of(dt).normalize(dt + delta)


def shift_days(dt: datetime, days: int) -> datetime:
    """
    Move an aware datetime by whole calendar days.

    The wall-clock time is kept, so the exact distance may differ from
    days * 24h when a DST transition lies in between.
    """
    naive = dt.replace(tzinfo=None) + timedelta(days=days)
    return localize(naive, zone_of(dt))


def local_date(dt: datetime, tz: tzinfo = None) -> date:
    """Get the calendar date of an aware datetime, optionally in another zone."""
    if tz is not None:
        dt = to_zone(dt, tz)
    return dt.date()


def parse_datetime(text: str, tz: tzinfo) -> datetime:
    """
    Parse 'YYYY-MM-DDTHH:MM' as a wall-clock time in the given zone.

    Raises:
        InvalidArgumentError: on missing or malformed text.
    """
    return localize(parse_naive_datetime(text), tz)


def parse_naive_datetime(text: str) -> datetime:
    if not text:
        raise InvalidArgumentError("Missing date-time value.")
    try:
        return datetime.strptime(text.strip(), DATETIME_FORMAT)
    except ValueError:
        raise InvalidArgumentError(
            f"Invalid date-time '{text}': expected YYYY-MM-DDTHH:MM."
        )


def parse_date(text: str) -> date:
    """
    Parse 'YYYY-MM-DD'.

    Raises:
        InvalidArgumentError: on missing or malformed text.
    """
    if not text:
        raise InvalidArgumentError("Missing date value.")
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError:
        raise InvalidArgumentError(f"Invalid date '{text}': expected YYYY-MM-DD.")


def format_datetime(dt: datetime) -> str:
    """Render an aware datetime as 'YYYY-MM-DDTHH:MM' plus its zone id."""
    return f"{dt.strftime(DATETIME_FORMAT)}[{zone_name(dt.tzinfo)}]"
