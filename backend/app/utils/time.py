from datetime import datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from ..config import get_settings


def utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@lru_cache
def display_zone() -> ZoneInfo:
    return ZoneInfo(get_settings().display_timezone)


def utc_naive_to_local(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc).astimezone(display_zone())
