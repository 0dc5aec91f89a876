"""
test_status_utils.py: the four-valued hour status and input validation rules.

All tests are pure unit tests; no database required.
"""

from datetime import date, datetime

import pytest

from exceptions import InvalidInput
from schemas.work_log import WorkLogStatus
from utils.status_utils import (count_statuses, is_active, parse_day, parse_status,
                                validate_hour, validate_note)


class TestParseStatus:

    @pytest.mark.parametrize("raw, expected", [
        ("pending", WorkLogStatus.PENDING),
        ("in-progress", WorkLogStatus.IN_PROGRESS),
        ("completed", WorkLogStatus.COMPLETED),
        ("break", WorkLogStatus.BREAK),
    ])
    def test_accepts_the_four_statuses(self, raw, expected):
        assert parse_status(raw) is expected

    def test_enum_passes_through(self):
        assert parse_status(WorkLogStatus.BREAK) is WorkLogStatus.BREAK

    @pytest.mark.parametrize("raw", ["done", "In-Progress", "", None, 3])
    def test_rejects_anything_else(self, raw):
        with pytest.raises(InvalidInput):
            parse_status(raw)

    def test_every_status_can_follow_every_other(self):
        """There is no transition guard: any value may replace any value."""
        for previous in WorkLogStatus:
            for following in WorkLogStatus:
                assert parse_status(following.value) is following, previous


class TestValidateHour:

    @pytest.mark.parametrize("hour", [0, 9, 23])
    def test_valid_hours(self, hour):
        assert validate_hour(hour) == hour

    @pytest.mark.parametrize("hour", [-1, 24, 100])
    def test_out_of_range(self, hour):
        with pytest.raises(InvalidInput):
            validate_hour(hour)

    @pytest.mark.parametrize("hour", ["9", 9.0, None, True])
    def test_non_integers(self, hour):
        with pytest.raises(InvalidInput):
            validate_hour(hour)


class TestParseDay:

    def test_iso_string(self):
        assert parse_day("2026-10-19") == date(2026, 10, 19)

    def test_date_object(self):
        assert parse_day(date(2026, 10, 19)) == date(2026, 10, 19)

    def test_datetime_is_truncated(self):
        assert parse_day(datetime(2026, 10, 19, 17, 45)) == date(2026, 10, 19)

    @pytest.mark.parametrize("raw", ["19/10/2026", "2026-13-01", "", None, 20261019])
    def test_rejects_non_iso_dates(self, raw):
        with pytest.raises(InvalidInput):
            parse_day(raw)


class TestNotes:

    def test_none_becomes_empty(self):
        assert validate_note(None) == ""

    def test_too_long(self):
        with pytest.raises(InvalidInput):
            validate_note("x" * 5001)

    def test_not_a_string(self):
        with pytest.raises(InvalidInput):
            validate_note(42)


class TestDerivedCounts:

    def test_only_pending_is_inactive(self):
        assert not is_active(WorkLogStatus.PENDING)
        assert is_active(WorkLogStatus.IN_PROGRESS)
        assert is_active(WorkLogStatus.COMPLETED)
        assert is_active(WorkLogStatus.BREAK)

    def test_count_statuses_reports_every_status(self):
        counts = count_statuses([WorkLogStatus.COMPLETED, "completed", WorkLogStatus.BREAK])
        assert counts == {
            WorkLogStatus.PENDING: 0,
            WorkLogStatus.IN_PROGRESS: 0,
            WorkLogStatus.COMPLETED: 2,
            WorkLogStatus.BREAK: 1,
        }
