from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo
from settings.config import settings

def restaurant_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def local_today() -> date:
    """Calendar date at the restaurant, used for the today/upcoming filters."""
    return datetime.now(restaurant_tz()).date()
