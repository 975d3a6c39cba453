"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import List, Tuple


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def month_bounds(day: date) -> Tuple[date, date]:
    """First and last calendar day of the month containing `day`"""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def next_month_bounds(day: date) -> Tuple[date, date]:
    """First and last calendar day of the month after the one containing `day`"""
    _, end_of_month = month_bounds(day)
    return month_bounds(end_of_month + timedelta(days=1))
