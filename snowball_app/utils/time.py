"""
Calendar helpers for weekly periods and contribution intervals.

All simulation periods are calendar dates; a week is identified by its
ISO (year, week) pair so that weekly resampling is independent of which
weekday a market happens to close on.
"""

import calendar
from datetime import date, timedelta


def week_key(day: date) -> tuple[int, int]:
    """ISO (year, week) of a date."""
    iso = day.isocalendar()
    return iso[0], iso[1]


def month_key(day: date) -> tuple[int, int]:
    """(year, month) of a date."""
    return day.year, day.month


def quarter_key(day: date) -> tuple[int, int]:
    """(year, quarter) of a date, quarters numbered 1-4."""
    return day.year, (day.month - 1) // 3 + 1


def add_weeks(day: date, weeks: int) -> date:
    """Shift a date by a number of weeks."""
    return day + timedelta(weeks=weeks)


def add_months(day: date, months: int) -> date:
    """
    Shift a date by calendar months, clamping to the end of the month.

    add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    """
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def years_between(start: date, end: date) -> float:
    """Elapsed years between two dates using a 365.25-day year."""
    return (end - start).days / 365.25
