"""
Month-key arithmetic.

Entries are bucketed by calendar month under keys of the form YYYY-MM.
Everything that walks across months (rolling chart windows, the savings
history) goes through these helpers so year boundaries are handled in
one place.
"""

import re
from datetime import date
from typing import Optional

MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def month_key(value: date) -> str:
    """Truncate a date to its YYYY-MM bucket key."""
    return f"{value.year:04d}-{value.month:02d}"


def is_month_key(value: str) -> bool:
    return bool(MONTH_KEY_PATTERN.match(value))


def parse_month_key(key: str) -> tuple[int, int]:
    """
    Split a month key into (year, month).

    Raises:
        ValueError: If the key is not of the form YYYY-MM
    """
    match = MONTH_KEY_PATTERN.match(key)
    if not match:
        raise ValueError(f"Invalid month key: {key!r} (expected YYYY-MM)")
    return int(match.group(1)), int(match.group(2))


def format_month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """
    Move (year, month) by delta months, rolling over year boundaries
    in either direction.
    """
    month += delta
    while month < 1:
        month += 12
        year -= 1
    while month > 12:
        month -= 12
        year += 1
    return year, month


def month_window(end_key: str, months_count: int) -> list[str]:
    """
    Return months_count consecutive month keys ending at end_key
    (inclusive), oldest first.

    The start month is end - (months_count - 1), normalized into a valid
    year/month; the window is then generated by walking forward one
    calendar month at a time.
    """
    if months_count < 1:
        raise ValueError(f"months_count must be at least 1, got {months_count}")

    end_year, end_month = parse_month_key(end_key)
    year, month = shift_month(end_year, end_month, -(months_count - 1))

    keys = []
    for _ in range(months_count):
        keys.append(format_month_key(year, month))
        year, month = shift_month(year, month, 1)
    return keys


def current_month_key(today: Optional[date] = None) -> str:
    return month_key(today or date.today())


def month_label(key: str, style: str = "short") -> str:
    """
    Human label for a month key.

    "short" gives "Mar 24" (chart axes), "long" gives "March 2024".
    """
    year, month = parse_month_key(key)
    first = date(year, month, 1)
    if style == "long":
        return first.strftime("%B %Y")
    return first.strftime("%b %y")
