"""Date utilities for gigbook.

Pure functions for date range calculations and formatting. Dates are
plain ISO strings (YYYY-MM-DD) compared as calendar days, with no
timezone handling.
"""

from datetime import date, datetime, timedelta

import pandas as pd

from gigbook.domain.models import Month

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def month_range(month: Month) -> tuple[str, str, str]:
    """Calculate date range and label for a month.

    Args:
        month: Month in YYYY-MM format.

    Returns:
        Tuple of (since_date, until_date, label) where:
        - since_date: First day of month (YYYY-MM-DD)
        - until_date: First day of next month (YYYY-MM-DD), exclusive
        - label: Human-readable month (e.g., "January 2025")
    """
    dt = datetime.strptime(month, "%Y-%m")
    since = dt.strftime("%Y-%m-01")
    next_month = (dt.replace(day=28) + timedelta(days=4)).replace(day=1)
    until = next_month.strftime("%Y-%m-%d")
    label = dt.strftime("%B %Y")
    return since, until, label


def to_month(year: int, month: int) -> Month:
    """Build a Month from year and month numbers.

    Raises:
        ValueError: If month is not between 1 and 12.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return Month(f"{year:04d}-{month:02d}")


def parse_month(month: str) -> tuple[int, int]:
    """Parse YYYY-MM into (year, month).

    Raises:
        ValueError: If the string is not a valid month.
    """
    dt = datetime.strptime(month, "%Y-%m")
    return dt.year, dt.month


def previous_month(year: int, month: int) -> tuple[int, int]:
    """Return (year, month) of the calendar month before the given one."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_of(date_str: str) -> tuple[int, int]:
    """Return (year, month) for an ISO date string."""
    d = date.fromisoformat(date_str)
    return d.year, d.month


def is_past_date(date_str: str, today: date) -> bool:
    """Check if a date is strictly before today. Today itself is not past."""
    return date.fromisoformat(date_str) < today


def days_since(date_str: str, today: date) -> int:
    """Whole days elapsed from date_str to today (negative if in the future)."""
    return (today - date.fromisoformat(date_str)).days


def weekday_name(date_str: str) -> str:
    return WEEKDAYS[date.fromisoformat(date_str).weekday()]


def normalize_date(raw_date: str) -> str:
    """Normalize a user-supplied date string to ISO format (YYYY-MM-DD).

    ISO input is taken as-is; anything else goes through pandas.to_datetime
    with day-first parsing (e.g. "05/01/2025" is 5 January).

    Raises:
        ValueError: If date cannot be parsed.
    """
    raw_date = raw_date.strip()
    try:
        return date.fromisoformat(raw_date).isoformat()
    except ValueError:
        pass

    try:
        parsed_date = pd.to_datetime(raw_date, dayfirst=True)
    except (ValueError, pd.errors.ParserError) as e:
        raise ValueError(f"Could not parse date '{raw_date}': {e}") from e
    if pd.isna(parsed_date):
        raise ValueError(f"Could not parse date '{raw_date}'")
    return parsed_date.strftime("%Y-%m-%d")
