'''
Week arithmetic used for scheduling requests.
'''
from datetime import date, timedelta
from typing import Optional


def next_monday(day: Optional[date] = None) -> date:
    """
    Returns the Monday strictly after `day` (today if None).
    A Monday maps to the following Monday, so requests always target a future week.
    """
    day = day or date.today()
    return day + timedelta(days=7 - day.weekday())


def monday_of_week(day: Optional[date] = None) -> date:
    """Returns the Monday of the week containing `day` (today if None)."""
    day = day or date.today()
    return day - timedelta(days=day.weekday())


def is_monday(day: Optional[date]) -> bool:
    return day is not None and day.weekday() == 0
