"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta
from typing import List, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def is_known_timezone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def generate_date_range(start: date, days: int) -> List[date]:
    """Generate `days` consecutive dates beginning at start"""
    return [start + timedelta(days=i) for i in range(days)]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def effective_day(day: int, on: date) -> int:
    """Clamp a configured day of month to the length of on's month (31 in February -> 28/29)"""
    return min(day, days_in_month(on.year, on.month))


def to_calendar_date(value: Union[date, datetime]) -> date:
    """Drop the time of day; datetimes are taken in their own wall-clock time"""
    if isinstance(value, datetime):
        return value.date()
    return value


def to_local_date(value: Union[date, datetime], timezone: str) -> date:
    """Calendar date of value as seen in timezone (naive datetimes are assumed UTC)"""
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=ZoneInfo("UTC"))
    return value.astimezone(ZoneInfo(timezone)).date()


def today_in(timezone: str) -> date:
    return datetime.now(ZoneInfo(timezone)).date()
