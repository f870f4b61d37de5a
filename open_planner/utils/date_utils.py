"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import Tuple


def first_day_of_month(year: int, month: int) -> date:
    """First calendar day of the given month"""
    return date(year, month, 1)


def last_day_of_month(year: int, month: int) -> date:
    """Last calendar day of the given month (leap years included)"""
    return date(year, month, calendar.monthrange(year, month)[1])


def previous_month(year: int, month: int) -> Tuple[int, int]:
    """(year, month) of the month before, wrapping January into December"""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end, ignoring the day of month"""
    return (end.year - start.year) * 12 + (end.month - start.month)
