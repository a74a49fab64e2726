"""Tests for calbook/config.py"""

from pathlib import Path

import pytest

from calbook import Config, CreateType
from calbook.errors import InvalidArgumentError


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "calbook.toml"
    path.write_text(text)
    return path


class TestLoad:

    def test_nested_calendar_tables(self, tmp_path):
        path = _write(tmp_path, """
[General]
default_timezone = "Europe/London"
export_dir = "exports"
debug = true

[Calendar.Work]
timezone = "America/New_York"

[[Calendar.Work.events]]
subject = "Standup"
start = "2025-12-01T09:00"
end = "2025-12-01T09:15"
weekdays = "MWF"
times = 3

[[Calendar.Work.events]]
subject = "Offsite"
on = 2025-12-04

[Calendar.Home]
active = true
""")
        config = Config.load(path)

        assert config.default_timezone == "Europe/London"
        assert config.export_dir == Path("exports")
        assert config.debug is True
        assert [c.name for c in config.calendars] == ["Work", "Home"]
        work, home = config.calendars
        assert work.timezone == "America/New_York"
        assert [e.type for e in work.events] == [
            CreateType.TIMED_RECURRING_FOR, CreateType.ALL_DAY_SINGLE,
        ]
        assert work.events[1].on_date == "2025-12-04"
        assert home.timezone == "Europe/London"
        assert config.active_calendar == "Home"

    def test_quoted_dot_keys(self, tmp_path):
        path = _write(tmp_path, """
["Calendar.Work"]
timezone = "Asia/Tokyo"
""")
        config = Config.load(path)
        assert [(c.name, c.timezone) for c in config.calendars] == [("Work", "Asia/Tokyo")]
        assert config.active_calendar == "Work"
        assert config.default_timezone == "America/New_York"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.load(tmp_path / "missing.toml")

    def test_malformed_toml(self, tmp_path):
        path = _write(tmp_path, "[General\n")
        with pytest.raises(InvalidArgumentError, match="Invalid configuration file"):
            Config.load(path)

    def test_invalid_zone(self, tmp_path):
        path = _write(tmp_path, '[Calendar.Work]\ntimezone = "Atlantis/Central"\n')
        with pytest.raises(InvalidArgumentError, match="Invalid Time Zone"):
            Config.load(path)

    def test_recurring_entry_needs_end_condition(self, tmp_path):
        path = _write(tmp_path, """
[[Calendar.Work.events]]
subject = "Standup"
start = "2025-12-01T09:00"
end = "2025-12-01T09:15"
weekdays = "MWF"
""")
        with pytest.raises(InvalidArgumentError, match="'times' or 'until'"):
            Config.load(path)

    def test_non_bool_debug(self):
        with pytest.raises(InvalidArgumentError):
            Config.from_dict({'General': {'debug': "yes"}})

    def test_duplicate_calendar_names(self):
        data = {
            'Calendar.Work': {},
            'Calendar': {'Work': {}},
        }
        with pytest.raises(InvalidArgumentError, match="more than once"):
            Config.from_dict(data)

    def test_default_path_respects_xdg(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert Config.get_default_config_path() == tmp_path / "calbook" / "calbook.toml"
