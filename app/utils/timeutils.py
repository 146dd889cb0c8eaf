from datetime import datetime, date, time, timedelta
from zoneinfo import ZoneInfo

from app.core.config import settings


def local_now() -> datetime:
    """Current wall-clock time in the business timezone, without tzinfo.

    All datetimes are stored naive in business-local time.
    """
    return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def day_bounds(day: date):
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def js_weekday(value: date) -> int:
    """Day of week with Sunday as 0, the numbering used by working hours."""
    return (value.weekday() + 1) % 7
