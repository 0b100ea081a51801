"""
Tests for tolerant API date parsing
"""
from datetime import date, datetime, timezone, timedelta

import pytest

from packages.common.dates import end_of_day, parse_api_date, start_of_day


class TestParseApiDate:

    @pytest.mark.parametrize("value,expected", [
        ("2024-02-05", datetime(2024, 2, 5)),
        ("2024-02-05 10:15:00", datetime(2024, 2, 5, 10, 15)),
        ("2024-02-05T10:15:00", datetime(2024, 2, 5, 10, 15)),
        ("2024-02-05T10:15:00Z", datetime(2024, 2, 5, 10, 15)),
        ("2024-02-05T11:15:00+01:00", datetime(2024, 2, 5, 10, 15)),
        ("  2024-02-05  ", datetime(2024, 2, 5)),
    ])
    def test_accepted_formats(self, value, expected):
        assert parse_api_date(value) == expected

    @pytest.mark.parametrize("value", [
        None, "", "   ", "0000-00-00", "0000-00-00 00:00:00", "not a date", "31/02/2024", 12345,
    ])
    def test_unreadable_values_are_none(self, value):
        assert parse_api_date(value) is None

    def test_date_and_datetime_objects(self):
        assert parse_api_date(date(2024, 2, 5)) == datetime(2024, 2, 5)
        aware = datetime(2024, 2, 5, 12, 0, tzinfo=timezone(timedelta(hours=1)))
        assert parse_api_date(aware) == datetime(2024, 2, 5, 11, 0)


class TestDayBounds:

    def test_start_and_end_of_day(self):
        assert start_of_day(date(2024, 2, 1)) == datetime(2024, 2, 1, 0, 0)
        end = end_of_day(date(2024, 2, 28))
        assert end.date() == date(2024, 2, 28)
        assert end > datetime(2024, 2, 28, 23, 59, 59)

    def test_datetime_input_uses_its_day(self):
        assert start_of_day(datetime(2024, 2, 1, 15, 30)) == datetime(2024, 2, 1)
