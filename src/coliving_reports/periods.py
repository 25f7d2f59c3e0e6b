"""Reporting periods, date parsing and time buckets.

Every filter in the package goes through PeriodWindow, a closed interval
that includes both its start and end dates.
"""

from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import BaseModel, Field, field_validator

from .exceptions import ValidationError


class Granularity(str, Enum):
    """Bucket sizes for time series."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class GroupBy(str, Enum):
    """Grouping for profit & loss breakdowns."""

    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

    @property
    def granularity(self) -> Granularity:
        """The bucket granularity for this grouping."""
        return {
            GroupBy.MONTH: Granularity.MONTHLY,
            GroupBy.QUARTER: Granularity.QUARTERLY,
            GroupBy.YEAR: Granularity.YEARLY,
        }[self]


class ReportType(str, Enum):
    """Cadence label attached to a financial report."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


def parse_date(value: Any) -> Optional[date]:
    """Parse a stored date value, returning None when it cannot be read.

    Accepts date and datetime objects and ISO 8601 strings, with or without
    a time part (e.g. "2024-01-15" or "2024-01-01T00:00:00.000Z").
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def require_date(value: Any, field: str) -> date:
    """Parse a caller-supplied date, raising ValidationError if unreadable."""
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(
            f"Invalid date for {field}",
            field=field,
            value=str(value),
            constraint="ISO 8601 date or datetime",
        )
    return parsed


def coerce_enum(enum_cls: type[Enum], value: Any, field: str):
    """Convert a caller-supplied value to a member of enum_cls."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid value for {field}: {value}",
            field=field,
            value=str(value),
            constraint=f"Must be one of: {allowed}",
        ) from None


class PeriodWindow(BaseModel):
    """A closed date interval used to filter records.

    Both start and end are inclusive.
    """

    start: date = Field(description="First day of the window (inclusive)")
    end: date = Field(description="Last day of the window (inclusive)")

    @field_validator("end")
    @classmethod
    def end_not_before_start(cls, v, info):
        """Validate that end is not before start."""
        if "start" in info.data and v < info.data["start"]:
            raise ValueError("end must be on or after start")
        return v

    @classmethod
    def from_values(cls, start: Any, end: Any) -> "PeriodWindow":
        """Build a window from caller input (strings, dates or datetimes).

        Raises:
            ValidationError: If either date is unreadable or end precedes start.
        """
        start_date = require_date(start, "start_date")
        end_date = require_date(end, "end_date")
        if end_date < start_date:
            raise ValidationError(
                "end_date must be on or after start_date",
                field="end_date",
                value=end_date.isoformat(),
                constraint=f">= {start_date.isoformat()}",
            )
        return cls(start=start_date, end=end_date)

    @classmethod
    def for_tax_year(cls, tax_year: int) -> "PeriodWindow":
        """January 1 through December 31 of tax_year."""
        return cls(start=date(tax_year, 1, 1), end=date(tax_year, 12, 31))

    @property
    def days(self) -> int:
        """Number of days covered, counting both ends."""
        return (self.end - self.start).days + 1

    @property
    def midpoint(self) -> date:
        """Last day of the first half of the window."""
        return self.start + timedelta(days=(self.days - 1) // 2)

    def contains(self, value: Optional[date]) -> bool:
        """Return True if value lies inside the window. None never does."""
        if value is None:
            return False
        return self.start <= value <= self.end

    def previous(self) -> Optional["PeriodWindow"]:
        """The window of equal length ending the day before this one starts.

        Returns None for a window starting on date.min. A previous window
        that would begin before date.min is truncated to start there.
        """
        if self.start == date.min:
            return None
        end = self.start - timedelta(days=1)
        room = (end - date.min).days + 1
        return PeriodWindow(start=end - timedelta(days=min(self.days, room) - 1), end=end)


# =============================================================================
# BUCKETS
# =============================================================================


def add_months(value: date, months: int) -> Optional[date]:
    """Return the first day of the month `months` after value's month.

    Returns None when that month falls outside the supported year range.
    """
    index = value.year * 12 + (value.month - 1) + months
    year = index // 12
    if not MINYEAR <= year <= MAXYEAR:
        return None
    return date(year, index % 12 + 1, 1)


def bucket_start(value: date, granularity: Granularity) -> date:
    """First day of the bucket containing value."""
    if granularity == Granularity.DAILY:
        return value
    if granularity == Granularity.WEEKLY:
        return value - timedelta(days=value.weekday())
    if granularity == Granularity.MONTHLY:
        return value.replace(day=1)
    if granularity == Granularity.QUARTERLY:
        return date(value.year, (value.month - 1) // 3 * 3 + 1, 1)
    return date(value.year, 1, 1)


def next_bucket_start(start: date, granularity: Granularity) -> Optional[date]:
    """First day of the bucket following the one starting at start.

    Returns None when the next bucket would begin after date.max.
    """
    if granularity in (Granularity.DAILY, Granularity.WEEKLY):
        step = 1 if granularity == Granularity.DAILY else 7
        if (date.max - start).days < step:
            return None
        return start + timedelta(days=step)
    if granularity == Granularity.MONTHLY:
        return add_months(start, 1)
    if granularity == Granularity.QUARTERLY:
        return add_months(start, 3)
    if start.year == MAXYEAR:
        return None
    return date(start.year + 1, 1, 1)


def bucket_label(value: date, granularity: Granularity) -> str:
    """Label of the bucket containing value.

    Labels are YYYY-MM-DD, YYYY-Www (ISO week), YYYY-MM, YYYY-Qn or YYYY.
    """
    if granularity == Granularity.DAILY:
        return value.isoformat()
    if granularity == Granularity.WEEKLY:
        iso = value.isocalendar()
        return f"{iso[0]:04d}-W{iso[1]:02d}"
    if granularity == Granularity.MONTHLY:
        return f"{value.year:04d}-{value.month:02d}"
    if granularity == Granularity.QUARTERLY:
        return f"{value.year:04d}-Q{(value.month - 1) // 3 + 1}"
    return f"{value.year:04d}"


def iter_bucket_starts(window: PeriodWindow, granularity: Granularity) -> Iterator[date]:
    """Yield the start of every bucket that overlaps the window, in order."""
    current = bucket_start(window.start, granularity)
    while current is not None and current <= window.end:
        yield current
        current = next_bucket_start(current, granularity)
