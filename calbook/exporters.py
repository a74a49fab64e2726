"""
Event exporters.

Two formats are supported, chosen by file extension:
- .csv: Google Calendar import schema
- .ics / .ical: RFC 5545 VCALENDAR built with the icalendar library
"""

import csv
import io
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Collection, Optional, Union

import pytz
from icalendar import Calendar as ICalCalendar, Event as ICalEvent

from .debug import debug_print
from .errors import InvalidArgumentError
from .model import ALL_DAY_END, ALL_DAY_START, Event


PRODID = '-//calbook//calbook//EN'

GOOGLE_CSV_HEADER = [
    "Subject", "Start Date", "Start Time", "End Date", "End Time",
    "All Day Event", "Description", "Location", "Private",
]
GOOGLE_DATE_FORMAT = "%m/%d/%Y"
GOOGLE_TIME_FORMAT = "%I:%M %p"

ICAL_STATUSES = ("CONFIRMED", "TENTATIVE", "CANCELLED")


def _debug_print(message: str) -> None:
    debug_print("EXPORT", message)


def _sorted(events: Collection[Event]) -> list[Event]:
    return sorted(events, key=lambda e: (e.start, e.end, e.subject))


def is_all_day(event: Event) -> bool:
    """True if the event occupies exactly the fixed all-day window."""
    return (
        event.spans_single_day()
        and (event.start.hour, event.start.minute) == ALL_DAY_START
        and (event.end.hour, event.end.minute) == ALL_DAY_END
    )


class EventExporter(ABC):
    """Writes a collection of events to a file and returns its absolute path."""

    @abstractmethod
    def render(self, events: Collection[Event]) -> bytes:
        """Serialize events into the file format."""
        pass

    def export(self, events: Collection[Event], file_name: Union[str, Path]) -> str:
        path = Path(file_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.render(events))
        _debug_print(f"{type(self).__name__}: wrote {len(events)} event(s) to {path}")
        return str(path.resolve())


class GoogleCsvExporter(EventExporter):
    """CSV in the column layout Google Calendar imports."""

    def render(self, events: Collection[Event]) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(GOOGLE_CSV_HEADER)
        for event in _sorted(events):
            all_day = is_all_day(event)
            writer.writerow([
                event.subject,
                event.start.strftime(GOOGLE_DATE_FORMAT),
                "" if all_day else event.start.strftime(GOOGLE_TIME_FORMAT),
                event.end.strftime(GOOGLE_DATE_FORMAT),
                "" if all_day else event.end.strftime(GOOGLE_TIME_FORMAT),
                "True" if all_day else "False",
                event.description,
                event.location,
                "False",
            ])
        return buffer.getvalue().encode('utf-8')


class IcalExporter(EventExporter):
    """iCalendar file with one VEVENT per event, times in UTC."""

    def __init__(self, now: Optional[datetime] = None):
        self._now = now

    @staticmethod
    def map_status(status: str) -> str:
        upper = (status or "").strip().upper()
        return upper if upper in ICAL_STATUSES else "CONFIRMED"

    def build_calendar(self, events: Collection[Event]) -> ICalCalendar:
        stamp = self._now or datetime.now(pytz.UTC)
        vcal = ICalCalendar()
        vcal.add('prodid', PRODID)
        vcal.add('version', '2.0')
        vcal.add('calscale', 'GREGORIAN')

        for event in _sorted(events):
            vevent = ICalEvent()
            vevent.add('uid', str(uuid.uuid4()))
            vevent.add('dtstamp', stamp)
            vevent.add('dtstart', event.start.astimezone(pytz.UTC))
            vevent.add('dtend', event.end.astimezone(pytz.UTC))
            vevent.add('summary', event.subject)
            if event.location:
                vevent.add('location', event.location)
            if event.description:
                vevent.add('description', event.description)
            vevent.add('status', self.map_status(event.status))
            vcal.add_component(vevent)
        return vcal

    def render(self, events: Collection[Event]) -> bytes:
        return self.build_calendar(events).to_ical()


EXPORTERS = {
    'csv': GoogleCsvExporter,
    'ics': IcalExporter,
    'ical': IcalExporter,
}


def get_exporter(file_name: str) -> EventExporter:
    """
    Pick an exporter by file extension.

    Raises:
        InvalidArgumentError: if the name has no extension or an unsupported one.
    """
    if not file_name:
        raise InvalidArgumentError("Invalid file name.")
    suffix = Path(file_name).suffix
    if not suffix or suffix == '.':
        raise InvalidArgumentError("Invalid file name or missing extension.")
    extension = suffix[1:].lower()
    exporter_class = EXPORTERS.get(extension)
    if exporter_class is None:
        raise InvalidArgumentError(f"Error: File type '.{extension}' is not supported.")
    return exporter_class()
