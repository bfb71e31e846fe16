import dateparser
from datetime import date, datetime, timedelta
from typing import Tuple, Union
import pytz

from app.config import settings


def get_current_datetime(tz: str = None) -> datetime:
    """Current datetime in the configured (or given) timezone."""
    return datetime.now(pytz.timezone(tz or settings.TZ))


def default_stay_dates(tz: str = None) -> Tuple[date, date]:
    """Check-in tomorrow, check-out the day after."""
    today = get_current_datetime(tz).date()
    return today + timedelta(days=1), today + timedelta(days=2)


def to_iso_date(value: Union[str, date, None], tz: str = None) -> str:
    """Normalise a date or free-text date ("tomorrow", "12 March") to YYYY-MM-DD.

    Returns "" when the text cannot be parsed.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = value.strip()
    if not text:
        return ""
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass

    base = get_current_datetime(tz).replace(tzinfo=None)
    dt = dateparser.parse(text, settings={"RELATIVE_BASE": base, "PREFER_DATES_FROM": "future"})
    if dt:
        return dt.date().isoformat()
    return ""
