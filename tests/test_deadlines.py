"""Tests for utils/deadlines.py and utils/dates.py."""
from datetime import date, datetime, timezone

import pytest

from omnipply.utils.dates import format_date_display, parse_datetime, to_iso_midnight, to_local_date
from omnipply.utils.deadlines import (
    deadline_message,
    is_application_open,
    is_before_open_date,
    is_past_deadline,
    open_date_message,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestDates:
    def test_trailing_z_and_naive_are_utc(self):
        assert parse_datetime("2025-03-01T10:00:00Z") == datetime(2025, 3, 1, 10, tzinfo=timezone.utc)
        assert parse_datetime("2025-03-01T10:00:00") == datetime(2025, 3, 1, 10, tzinfo=timezone.utc)

    def test_offsets_converted_to_utc(self):
        assert parse_datetime("2025-03-01T10:00:00+02:00") == datetime(2025, 3, 1, 8, tzinfo=timezone.utc)

    def test_bad_input(self):
        assert parse_datetime("not a date") is None
        assert parse_datetime("") is None
        assert parse_datetime(None) is None

    def test_bare_date_keeps_calendar_day(self):
        assert to_local_date("2025-03-01") == date(2025, 3, 1)

    def test_display_and_midnight(self):
        assert format_date_display("2025-12-31") == "12/31/2025"
        assert format_date_display(None) == ""
        assert to_iso_midnight(date(2025, 3, 1)) == "2025-03-01T00:00:00.000Z"
        assert to_iso_midnight(None) is None


class TestWindow:
    def test_past_deadline(self):
        assert is_past_deadline("2025-03-01T11:00:00Z", NOW)
        assert not is_past_deadline("2025-03-01T13:00:00Z", NOW)
        assert not is_past_deadline(None, NOW)

    def test_before_open(self):
        assert is_before_open_date("2025-03-02", NOW)
        assert not is_before_open_date(None, NOW)

    @pytest.mark.parametrize(
        "opens, closes, expected",
        [
            (None, None, True),
            (None, "2025-02-01", False),
            ("2025-02-01", None, True),
            ("2025-04-01", None, False),
            ("2025-02-01", "2025-04-01", True),
            ("2025-02-01", "2025-02-15", False),
        ],
    )
    def test_is_application_open(self, opens, closes, expected):
        assert is_application_open(opens, closes, NOW) is expected


class TestMessages:
    @pytest.mark.parametrize(
        "deadline, message",
        [
            (None, "No deadline set"),
            ("2025-02-28", "Deadline passed"),
            ("2025-03-02T00:00:00Z", "Deadline tomorrow"),
            ("2025-03-05T00:00:00Z", "Deadline in 4 days"),
            ("2025-04-10T00:00:00Z", "Deadline: 04/10/2025"),
        ],
    )
    def test_deadline_message(self, deadline, message):
        assert deadline_message(deadline, NOW) == message

    @pytest.mark.parametrize(
        "opens, message",
        [
            (None, "No open date set"),
            ("2025-02-01", "Application is open"),
            ("2025-03-02T06:00:00Z", "Opens tomorrow"),
            ("2025-03-07T00:00:00Z", "Opens in 6 days"),
            ("2025-06-01T00:00:00Z", "Opens: 06/01/2025"),
        ],
    )
    def test_open_date_message(self, opens, message):
        assert open_date_message(opens, NOW) == message
