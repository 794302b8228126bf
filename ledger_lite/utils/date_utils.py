"""Date manipulation utilities"""

import calendar
from datetime import datetime, time, timedelta, timezone
from dateutil.relativedelta import relativedelta

# Gap left between a closed cycle's end and its successor's start
CYCLE_BOUNDARY = timedelta(milliseconds=1)


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime (the store's representation)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's length"""
    return moment + relativedelta(months=months)


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max)


def start_of_month(moment: datetime) -> datetime:
    return datetime(moment.year, moment.month, 1)


def end_of_month(moment: datetime) -> datetime:
    last_day = calendar.monthrange(moment.year, moment.month)[1]
    return datetime.combine(moment.date().replace(day=last_day), time.max)


def clamped_day(year: int, month: int, day: int) -> datetime:
    """Day `day` of the given month, or the month's last day if it is shorter"""
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, min(day, last_day))


def month_key(moment: datetime) -> str:
    """YYYY-MM bucket key"""
    return moment.strftime("%Y-%m")
