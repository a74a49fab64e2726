"""Tests for calbook/exporters.py"""

import csv
from datetime import datetime
from pathlib import Path

import pytest
import pytz
from icalendar import Calendar as ICalCalendar

from calbook import CalendarModel, CreateEventRequest
from calbook.errors import InvalidArgumentError
from calbook.exporters import (
    GOOGLE_CSV_HEADER, GoogleCsvExporter, IcalExporter, get_exporter, is_all_day,
)
from tests.conftest import make_event, ny


@pytest.fixture
def events():
    return [
        make_event("Review", "2025-03-03T14:00", "2025-03-03T15:30",
                   description="Quarterly", location="Room 1", status="tentative"),
        make_event("Offsite", "2025-03-04T08:00", "2025-03-04T17:00"),
    ]


class TestGetExporter:

    @pytest.mark.parametrize("name, expected", [
        ("out.csv", GoogleCsvExporter),
        ("out.ics", IcalExporter),
        ("OUT.ICAL", IcalExporter),
    ])
    def test_selects_by_extension(self, name, expected):
        assert isinstance(get_exporter(name), expected)

    def test_unsupported_extension(self):
        with pytest.raises(InvalidArgumentError, match="File type '.txt' is not supported"):
            get_exporter("out.txt")

    @pytest.mark.parametrize("name", ["", "noextension"])
    def test_missing_name_or_extension(self, name):
        with pytest.raises(InvalidArgumentError):
            get_exporter(name)


class TestGoogleCsv:

    def test_rows(self, events, tmp_path):
        path = GoogleCsvExporter().export(events, tmp_path / "out.csv")
        with open(path, newline="") as f:
            rows = list(csv.reader(f))

        assert rows[0] == GOOGLE_CSV_HEADER
        assert rows[1] == [
            "Review", "03/03/2025", "02:00 PM", "03/03/2025", "03:30 PM",
            "False", "Quarterly", "Room 1", "False",
        ]
        assert rows[2] == ["Offsite", "03/04/2025", "", "03/04/2025", "", "True", "", "", "False"]

    def test_all_day_detection(self, events):
        assert not is_all_day(events[0])
        assert is_all_day(events[1])

    def test_creates_parent_directories(self, events, tmp_path):
        path = GoogleCsvExporter().export(events, tmp_path / "nested" / "dir" / "out.csv")
        assert Path(path).is_file()
        assert Path(path).is_absolute()


class TestIcal:

    def test_parses_back(self, events, tmp_path):
        stamp = datetime(2025, 1, 1, tzinfo=pytz.UTC)
        path = IcalExporter(now=stamp).export(events, tmp_path / "out.ics")
        vcal = ICalCalendar.from_ical(Path(path).read_bytes())

        assert str(vcal['PRODID']) == '-//calbook//calbook//EN'
        vevents = vcal.walk('VEVENT')
        assert len(vevents) == 2
        review = vevents[0]
        assert str(review['SUMMARY']) == "Review"
        assert review['DTSTART'].dt == ny("2025-03-03T14:00")
        assert review['DTEND'].dt == ny("2025-03-03T15:30")
        assert str(review['LOCATION']) == "Room 1"
        assert str(review['STATUS']) == "TENTATIVE"
        assert str(vevents[1]['STATUS']) == "CONFIRMED"
        assert 'LOCATION' not in vevents[1]
        assert len({str(v['UID']) for v in vevents}) == 2

    @pytest.mark.parametrize("status, expected", [
        ("confirmed", "CONFIRMED"),
        ("Cancelled", "CANCELLED"),
        ("maybe", "CONFIRMED"),
        ("", "CONFIRMED"),
    ])
    def test_status_mapping(self, status, expected):
        assert IcalExporter.map_status(status) == expected


class TestModelExport:

    def test_relative_name_uses_export_dir(self, tmp_path):
        model = CalendarModel(export_dir=tmp_path)
        model.create_calendar("Work", "America/New_York")
        model.set_active_calendar("Work")
        model.create_event(CreateEventRequest.all_day_single("Offsite", "2025-03-04"))
        path = model.export_events("work.csv")
        assert Path(path) == (tmp_path / "work.csv").resolve()
        assert "Offsite" in Path(path).read_text()
