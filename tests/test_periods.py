"""Tests for periods, date parsing and buckets."""

from datetime import date, datetime

import pytest

from coliving_reports.exceptions import ValidationError
from coliving_reports.periods import (
    Granularity,
    GroupBy,
    PeriodWindow,
    add_months,
    bucket_label,
    bucket_start,
    coerce_enum,
    iter_bucket_starts,
    next_bucket_start,
    parse_date,
)


class TestParseDate:
    """Test suite for parse_date."""

    def test_iso_date(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)

    def test_iso_datetime_with_z(self):
        """Timestamps with a Z suffix and milliseconds should parse to their date."""
        assert parse_date("2024-02-28T23:59:59.999Z") == date(2024, 2, 28)

    def test_date_objects(self):
        assert parse_date(date(2024, 1, 1)) == date(2024, 1, 1)
        assert parse_date(datetime(2024, 1, 1, 12, 30)) == date(2024, 1, 1)

    def test_unreadable_values(self):
        """Unreadable values should parse to None."""
        assert parse_date("not-a-date") is None
        assert parse_date("") is None
        assert parse_date(None) is None
        assert parse_date(20240101) is None


class TestPeriodWindow:
    """Test suite for PeriodWindow."""

    def test_from_values(self):
        window = PeriodWindow.from_values("2024-01-01T00:00:00.000Z", "2024-02-28")

        assert window.start == date(2024, 1, 1)
        assert window.end == date(2024, 2, 28)
        assert window.days == 59

    def test_end_before_start(self):
        """An end date before the start should raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            PeriodWindow.from_values("2024-02-01", "2024-01-01")

        assert exc_info.value.field == "end_date"

    def test_unreadable_start(self):
        with pytest.raises(ValidationError) as exc_info:
            PeriodWindow.from_values("soon", "2024-01-01")

        assert exc_info.value.field == "start_date"

    def test_single_day_window(self):
        """A window may start and end on the same day."""
        window = PeriodWindow.from_values("2024-01-01", "2024-01-01")

        assert window.days == 1
        assert window.contains(date(2024, 1, 1))

    def test_contains_is_inclusive(self):
        window = PeriodWindow(start=date(2024, 1, 1), end=date(2024, 1, 31))

        assert window.contains(date(2024, 1, 1))
        assert window.contains(date(2024, 1, 31))
        assert not window.contains(date(2024, 2, 1))
        assert not window.contains(None)

    def test_previous(self):
        """The previous window should have the same length and end the day before."""
        window = PeriodWindow(start=date(2024, 2, 1), end=date(2024, 2, 29))
        previous = window.previous()

        assert previous.end == date(2024, 1, 31)
        assert previous.days == window.days

    def test_midpoint(self):
        window = PeriodWindow(start=date(2024, 1, 1), end=date(2024, 1, 10))

        assert window.midpoint == date(2024, 1, 5)

    def test_tax_year(self):
        window = PeriodWindow.for_tax_year(2024)

        assert window.start == date(2024, 1, 1)
        assert window.end == date(2024, 12, 31)
        assert window.days == 366


class TestBuckets:
    """Test suite for bucket helpers."""

    def test_add_months_rolls_year(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 1)

    def test_bucket_start(self):
        assert bucket_start(date(2024, 1, 10), Granularity.WEEKLY) == date(2024, 1, 8)
        assert bucket_start(date(2024, 5, 20), Granularity.QUARTERLY) == date(2024, 4, 1)
        assert bucket_start(date(2024, 5, 20), Granularity.YEARLY) == date(2024, 1, 1)

    def test_labels(self):
        day = date(2024, 5, 20)

        assert bucket_label(day, Granularity.DAILY) == "2024-05-20"
        assert bucket_label(day, Granularity.MONTHLY) == "2024-05"
        assert bucket_label(day, Granularity.QUARTERLY) == "2024-Q2"
        assert bucket_label(day, Granularity.YEARLY) == "2024"

    def test_iso_week_label_across_year(self):
        """Weeks should follow ISO numbering, which can cross the calendar year."""
        assert bucket_label(date(2024, 12, 30), Granularity.WEEKLY) == "2025-W01"
        assert bucket_label(date(2024, 1, 1), Granularity.WEEKLY) == "2024-W01"

    def test_iter_bucket_starts(self):
        """Buckets overlapping a partial window should all be included."""
        window = PeriodWindow(start=date(2024, 1, 15), end=date(2024, 3, 1))
        starts = list(iter_bucket_starts(window, Granularity.MONTHLY))

        assert starts == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]

    def test_group_by_granularity(self):
        assert GroupBy.MONTH.granularity == Granularity.MONTHLY
        assert GroupBy.QUARTER.granularity == Granularity.QUARTERLY
        assert GroupBy.YEAR.granularity == Granularity.YEARLY


class TestCoerceEnum:
    """Test suite for coerce_enum."""

    def test_accepts_names_case_insensitively(self):
        assert coerce_enum(Granularity, "Weekly", "granularity") == Granularity.WEEKLY
        assert coerce_enum(Granularity, Granularity.DAILY, "granularity") == Granularity.DAILY

    def test_rejects_unknown(self):
        """Unknown values should list the allowed choices."""
        with pytest.raises(ValidationError) as exc_info:
            coerce_enum(Granularity, "hourly", "granularity")

        assert "monthly" in exc_info.value.constraint


class TestCalendarEdges:
    """Windows at the ends of the supported date range."""

    def test_previous_of_first_day_is_none(self):
        window = PeriodWindow(start=date.min, end=date(1, 1, 31))

        assert window.previous() is None

    def test_previous_truncated_at_first_day(self):
        """A previous window that would start before date.min begins there."""
        window = PeriodWindow(start=date(1, 1, 11), end=date(1, 1, 30))
        previous = window.previous()

        assert previous.start == date.min
        assert previous.end == date(1, 1, 10)

    def test_add_months_past_last_year(self):
        assert add_months(date(9999, 12, 1), 1) is None
        assert add_months(date(9999, 10, 1), 3) is None
        assert add_months(date(9999, 11, 1), 1) == date(9999, 12, 1)

    @pytest.mark.parametrize("granularity", list(Granularity))
    def test_next_bucket_past_last_day(self, granularity):
        start = bucket_start(date.max, granularity)

        assert next_bucket_start(start, granularity) is None

    @pytest.mark.parametrize(
        "granularity,expected",
        [
            (Granularity.MONTHLY, [date(9999, 11, 1), date(9999, 12, 1)]),
            (Granularity.QUARTERLY, [date(9999, 10, 1)]),
            (Granularity.YEARLY, [date(9999, 1, 1)]),
        ],
    )
    def test_iter_bucket_starts_ends_at_last_day(self, granularity, expected):
        window = PeriodWindow(start=date(9999, 11, 15), end=date.max)

        assert list(iter_bucket_starts(window, granularity)) == expected
