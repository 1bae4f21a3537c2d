"""Date utilities for moola.

Pure functions for calendar arithmetic, period windows and formatting.
Month and year steps clamp to the last valid day of the target month, so
Jan 31 + 1 month is Feb 28 (or Feb 29 in a leap year) and never spills into March.
"""

import calendar
from datetime import date, datetime, timedelta

from moola.domain.models import DateStr, Frequency, Period

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string.

    Raises:
        ValueError: If the string is not a real calendar date.
    """
    return datetime.strptime(value, DATE_FORMAT).date()


def format_date(value: date) -> DateStr:
    """Format a date as YYYY-MM-DD (storage and comparison form)."""
    return DateStr(value.strftime(DATE_FORMAT))


def format_display_date(value: date) -> str:
    """Format a date as MM-DD-YYYY for display."""
    return value.strftime("%m-%d-%Y")


def format_header_date(value: date) -> str:
    """Format a date as "Sat · October 18" for headers."""
    return f"{value.strftime('%a')} · {value.strftime('%B')} {value.day}"


def is_leap_year(year: int) -> bool:
    return calendar.isleap(year)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def days_in_year(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length.

    Args:
        value: Starting date.
        months: Number of months to add (may be negative).

    Returns:
        Date in the target month with the same day, or its last day if shorter.
    """
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, days_in_month(year, month))
    return date(year, month, day)


def add_years(value: date, years: int) -> date:
    """Add calendar years; Feb 29 becomes Feb 28 in non-leap target years."""
    return add_months(value, years * 12)


def step_date(value: date, freq: Frequency) -> date:
    """Advance a date by exactly one recurrence step.

    Args:
        value: Date of the current occurrence.
        freq: Recurrence frequency.

    Returns:
        Date of the next occurrence.
    """
    freq = Frequency(freq)
    if freq is Frequency.WEEKLY:
        return value + timedelta(days=7)
    if freq is Frequency.MONTHLY:
        return add_months(value, 1)
    return add_years(value, 1)


def period_start(period: Period, today: date) -> date:
    """First day (inclusive) of a period window that ends on today.

    The week window is the trailing 7 days, not a calendar week.
    """
    period = Period(period)
    if period is Period.TODAY:
        return today
    if period is Period.WEEK:
        return today - timedelta(days=6)
    if period is Period.MONTH:
        return today.replace(day=1)
    return date(today.year, 1, 1)


def period_range(period: Period, today: date) -> tuple[DateStr, DateStr]:
    """Inclusive (since, until) bounds of a period window as YYYY-MM-DD strings."""
    return format_date(period_start(period, today)), format_date(today)


def period_label(period: Period, today: date) -> str:
    """Human-readable heading for a period (e.g. "October 2026")."""
    period = Period(period)
    if period is Period.TODAY:
        return format_header_date(today)
    if period is Period.WEEK:
        return "This Week"
    if period is Period.MONTH:
        return today.strftime("%B %Y")
    return f"Year {today.year}"
