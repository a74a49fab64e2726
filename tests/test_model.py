"""Tests for calbook/model.py and calbook/timezone_utils.py

Event identity is the (subject, start, end) triple; everything else
rides along. The timezone helpers must keep wall-clock and exact
arithmetic apart across DST transitions.
"""

from datetime import date, datetime, timedelta

import pytest
import pytz

from calbook.errors import InvalidArgumentError
from calbook.model import Calendar, new_series_id, parse_weekdays, weekday_name
from calbook.timezone_utils import (
    get_timezone, localize, parse_date, parse_datetime, shift, shift_days, zone_name,
)
from tests.conftest import LONDON, NEW_YORK, make_event, ny


class TestEventIdentity:
    """Equality and hashing only look at subject, start and end."""

    def test_equal_when_key_matches(self):
        first = make_event("Review", "2025-03-03T10:00", "2025-03-03T11:00",
                           series_id="a", location="Room 1", status="confirmed")
        second = make_event("Review", "2025-03-03T10:00", "2025-03-03T11:00",
                            series_id="b", description="other")
        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_not_equal_when_subject_differs(self):
        first = make_event("Review", "2025-03-03T10:00", "2025-03-03T11:00")
        second = make_event("Retro", "2025-03-03T10:00", "2025-03-03T11:00")
        assert first != second

    def test_not_equal_when_end_differs(self):
        first = make_event("Review", "2025-03-03T10:00", "2025-03-03T11:00")
        second = make_event("Review", "2025-03-03T10:00", "2025-03-03T11:30")
        assert first != second

    def test_with_changes_returns_new_event(self):
        original = make_event("Review", "2025-03-03T10:00", "2025-03-03T11:00")
        changed = original.with_changes(location="Lab")
        assert changed.location == "Lab"
        assert original.location == ""
        assert changed == original

    def test_events_are_immutable(self):
        event = make_event("Review", "2025-03-03T10:00", "2025-03-03T11:00")
        with pytest.raises(AttributeError):
            event.subject = "Other"

    def test_series_helpers(self):
        standalone = make_event("Review", "2025-03-03T10:00", "2025-03-03T11:00")
        occurrence = make_event("Review", "2025-03-04T10:00", "2025-03-04T11:00", series_id="s")
        assert not standalone.in_series
        assert occurrence.in_series
        assert occurrence.duration == timedelta(hours=1)
        assert occurrence.spans_single_day()


class TestCalendarValue:

    def test_with_events_builds_new_calendar(self):
        calendar = Calendar(name="Work", timezone=NEW_YORK)
        event = make_event("Review", "2025-03-03T10:00", "2025-03-03T11:00")
        updated = calendar.with_events([event])
        assert calendar.events == frozenset()
        assert updated.events == frozenset({event})
        assert updated.name == "Work"
        assert updated.timezone_name == "America/New_York"

    def test_renamed_keeps_zone_and_events(self):
        event = make_event("Review", "2025-03-03T10:00", "2025-03-03T11:00")
        calendar = Calendar(name="Work", timezone=NEW_YORK, events=frozenset({event}))
        renamed = calendar.renamed("Office")
        assert renamed.name == "Office"
        assert renamed.events == calendar.events
        assert renamed.timezone is calendar.timezone


class TestWeekdays:

    def test_parse_weekday_codes(self):
        assert parse_weekdays("MWF") == {0, 2, 4}
        assert parse_weekdays("trsu") == {1, 3, 5, 6}

    def test_empty_weekdays_rejected(self):
        with pytest.raises(InvalidArgumentError):
            parse_weekdays("")

    def test_unknown_weekday_rejected(self):
        with pytest.raises(InvalidArgumentError, match="Unknown weekday"):
            parse_weekdays("MX")

    @pytest.mark.parametrize("codes", ["  ", "\t", None])
    def test_blank_weekdays_rejected(self, codes):
        with pytest.raises(InvalidArgumentError, match="at least one weekday"):
            parse_weekdays(codes)

    def test_surrounding_whitespace_ignored(self):
        assert parse_weekdays(" MW ") == {0, 2}

    def test_weekday_name(self):
        assert weekday_name(ny("2025-12-01T09:00")) == "MONDAY"

    def test_series_ids_are_unique(self):
        assert len({new_series_id() for _ in range(50)}) == 50


class TestTimezoneUtils:

    def test_unknown_zone(self):
        with pytest.raises(InvalidArgumentError, match="Invalid Time Zone"):
            get_timezone("Mars/Olympus")

    def test_zone_name(self):
        assert zone_name(get_timezone("Europe/London")) == "Europe/London"

    def test_parse_datetime_in_zone(self):
        parsed = parse_datetime("2025-07-01T09:30", LONDON)
        assert parsed.utcoffset() == timedelta(hours=1)
        assert parsed.hour == 9 and parsed.minute == 30

    def test_parse_rejects_bad_text(self):
        with pytest.raises(InvalidArgumentError):
            parse_datetime("2025-07-01 09:30", LONDON)
        with pytest.raises(InvalidArgumentError):
            parse_date("07/01/2025")

    def test_parse_date(self):
        assert parse_date("2025-07-01") == date(2025, 7, 1)

    def test_gap_time_moves_forward(self):
        # 02:30 does not exist in New York on 2025-03-09
        moved = localize(datetime(2025, 3, 9, 2, 30), NEW_YORK)
        assert (moved.hour, moved.minute) == (3, 30)

    def test_ambiguous_time_takes_earlier_offset(self):
        first = localize(datetime(2025, 11, 2, 1, 30), NEW_YORK)
        assert first.utcoffset() == timedelta(hours=-4)

    def test_shift_is_exact_across_dst(self):
        before = ny("2025-03-08T12:00")
        after = shift(before, timedelta(hours=24))
        assert after - before == timedelta(hours=24)
        assert after.hour == 13

    def test_shift_days_keeps_wall_clock(self):
        before = ny("2025-03-08T12:00")
        after = shift_days(before, 1)
        assert after.hour == 12
        assert after.date() == date(2025, 3, 9)
        assert after.utcoffset() == timedelta(hours=-4)

    def test_equal_instants_in_different_zones_compare_equal(self):
        in_new_york = ny("2025-03-03T10:00")
        in_utc = in_new_york.astimezone(pytz.UTC)
        assert in_new_york == in_utc
