"""Expiration status classification for tracked documents."""

import calendar
from datetime import UTC, date, datetime
from enum import Enum

# Documents within this many days of expiring are flagged red
URGENT_WINDOW_DAYS = 14

# Documents expiring within this many calendar months are flagged yellow
WARNING_WINDOW_MONTHS = 2


class ExpirationStatus(str, Enum):
    """Color-coded urgency shown on the dashboard."""

    EXPIRED = "expired"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


def today_utc() -> date:
    return datetime.now(UTC).date()


def add_months(value: date, months: int) -> date:
    """Shift a date by calendar months, clamping to the last day of the month.

    Examples:
        add_months(date(2026, 1, 15), 2) -> date(2026, 3, 15)
        add_months(date(2025, 12, 31), 2) -> date(2026, 2, 28)
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_until(expiration_date: date, today: date | None = None) -> int:
    """Whole calendar days from today until the expiration date (negative once past)."""
    return (expiration_date - (today or today_utc())).days


def classify(expiration_date: date, today: date | None = None) -> ExpirationStatus:
    """Classify a document's expiration urgency."""
    today = today or today_utc()
    remaining = days_until(expiration_date, today)

    if remaining < 0:
        return ExpirationStatus.EXPIRED
    if remaining <= URGENT_WINDOW_DAYS:
        return ExpirationStatus.RED
    if expiration_date <= add_months(today, WARNING_WINDOW_MONTHS):
        return ExpirationStatus.YELLOW
    return ExpirationStatus.GREEN


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def describe(expiration_date: date, today: date | None = None) -> str:
    """Human-readable time until (or since) expiration."""
    remaining = days_until(expiration_date, today)

    if remaining < 0:
        elapsed = abs(remaining)
        if elapsed >= 30:
            return f"Expired {_plural(elapsed // 30, 'month')} ago"
        if elapsed >= 7:
            return f"Expired {_plural(elapsed // 7, 'week')} ago"
        return f"Expired {_plural(elapsed, 'day')} ago"

    if remaining == 0:
        return "Expires today"
    if remaining >= 60:
        return f"{_plural(remaining // 30, 'month')} until expiration"
    if remaining >= 14:
        return f"{_plural(remaining // 7, 'week')} until expiration"
    return f"{_plural(remaining, 'day')} until expiration"
