"""Tests for gigbook.dates pure functions."""

from datetime import date

import pytest

from gigbook.dates import (
    days_since,
    is_past_date,
    month_of,
    month_range,
    normalize_date,
    parse_month,
    previous_month,
    to_month,
    weekday_name,
)
from gigbook.domain.models import Month


class TestMonthRange:
    """Tests for month_range."""

    def test_january_range(self) -> None:
        """Should calculate range for January."""
        since, until, label = month_range(Month("2025-01"))

        assert since == "2025-01-01"
        assert until == "2025-02-01"
        assert label == "January 2025"

    def test_december_range_crosses_year(self) -> None:
        """Should handle December (crosses year boundary)."""
        since, until, label = month_range(Month("2025-12"))

        assert since == "2025-12-01"
        assert until == "2026-01-01"
        assert label == "December 2025"

    def test_february_leap_year(self) -> None:
        """Should handle February in leap year."""
        since, until, _ = month_range(Month("2024-02"))

        assert since == "2024-02-01"
        assert until == "2024-03-01"

    def test_invalid_month_number_raises_valueerror(self) -> None:
        """Should raise ValueError for invalid month number."""
        with pytest.raises(ValueError):
            month_range(Month("2025-13"))


class TestMonthHelpers:
    """Tests for to_month, parse_month, previous_month and month_of."""

    def test_to_month_pads(self) -> None:
        assert to_month(2025, 3) == "2025-03"

    def test_to_month_rejects_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            to_month(2025, 0)

    def test_parse_month(self) -> None:
        assert parse_month("2024-11") == (2024, 11)

    def test_parse_month_invalid(self) -> None:
        with pytest.raises(ValueError):
            parse_month("November")

    def test_previous_month_within_year(self) -> None:
        assert previous_month(2025, 6) == (2025, 5)

    def test_previous_month_of_january_is_last_december(self) -> None:
        assert previous_month(2025, 1) == (2024, 12)

    def test_month_of(self) -> None:
        assert month_of("2024-02-29") == (2024, 2)


class TestPastAndDaysSince:
    """Tests for is_past_date and days_since."""

    def test_yesterday_is_past(self) -> None:
        assert is_past_date("2025-03-09", date(2025, 3, 10))

    def test_today_is_not_past(self) -> None:
        """Date equal to today counts as not past."""
        assert not is_past_date("2025-03-10", date(2025, 3, 10))

    def test_future_is_not_past(self) -> None:
        assert not is_past_date("2025-03-11", date(2025, 3, 10))

    def test_days_since_whole_days(self) -> None:
        assert days_since("2025-01-01", date(2025, 3, 1)) == 59

    def test_days_since_same_day(self) -> None:
        assert days_since("2025-03-01", date(2025, 3, 1)) == 0

    def test_days_since_future_is_negative(self) -> None:
        assert days_since("2025-03-05", date(2025, 3, 1)) == -4


class TestNormalizeDate:
    """Tests for normalize_date."""

    def test_iso_passthrough(self) -> None:
        assert normalize_date("2025-01-15") == "2025-01-15"

    def test_strips_whitespace(self) -> None:
        assert normalize_date(" 2025-01-15 ") == "2025-01-15"

    def test_day_first(self) -> None:
        """Slash dates are read day first."""
        assert normalize_date("05/01/2025") == "2025-01-05"

    def test_garbage_raises(self) -> None:
        with pytest.raises(ValueError):
            normalize_date("not a date")


def test_weekday_name() -> None:
    assert weekday_name("2025-01-06") == "Monday"
    assert weekday_name("2025-01-12") == "Sunday"
