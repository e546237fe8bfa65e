"""
Date/Time Handling for Mission Cycles

RULES:
- Mission timestamps are timezone-aware and stored in UTC
- Reset boundaries (midnight, Monday) are computed in RESET_TIMEZONE
- Never mix naive and aware datetimes
"""

import logging
from datetime import datetime, date, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mission_engine.config import RESET_TIMEZONE
from mission_engine.models.mission import MissionFrequency

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"
UTC = ZoneInfo("UTC")


def get_reset_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    """
    Timezone used for reset boundaries

    Falls back to UTC when the configured name is unknown.
    """
    tz_str = tz_name or RESET_TIMEZONE or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(tz_str)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.error(f"Invalid reset timezone '{tz_str}': {e}")
        return UTC


def now_utc() -> datetime:
    """Current datetime in UTC (timezone-aware)"""
    return datetime.now(UTC)


def local_date(moment: datetime, tz: Optional[ZoneInfo] = None) -> date:
    """Calendar date of an aware datetime in the reset timezone"""
    return moment.astimezone(tz or get_reset_timezone()).date()


def next_daily_reset(now: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    """Next local midnight after now, in UTC"""
    tz = tz or get_reset_timezone()
    tomorrow = local_date(now, tz) + timedelta(days=1)
    return datetime.combine(tomorrow, time.min, tzinfo=tz).astimezone(UTC)


def next_weekly_reset(now: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    """Next local Monday midnight after now, in UTC"""
    tz = tz or get_reset_timezone()
    today = local_date(now, tz)
    days_ahead = 7 - today.weekday()  # Monday -> 7, Sunday -> 1
    monday = today + timedelta(days=days_ahead)
    return datetime.combine(monday, time.min, tzinfo=tz).astimezone(UTC)


def next_reset_time(frequency: MissionFrequency, now: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    """Reset time for a mission generated at now"""
    if frequency is MissionFrequency.WEEKLY:
        return next_weekly_reset(now, tz)
    return next_daily_reset(now, tz)
