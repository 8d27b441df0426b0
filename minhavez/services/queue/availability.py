"""Manual toggle + weekly schedule gates for the public queue form."""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

import pytz

from minhavez.config.settings import settings
from minhavez.core.exceptions import ValidationError
from minhavez.models.business import Business
from minhavez.models.queue_schedule import QueueSchedule, parse_hhmm

logger = logging.getLogger(__name__)


def business_timezone(business: Business):
    tz_name = business.timezone or settings.DEFAULT_TIMEZONE
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{tz_name}' for business {business.id}; using UTC")
        return pytz.UTC


def js_weekday(moment: datetime) -> int:
    """Sunday = 0 .. Saturday = 6, as stored by the dashboard."""
    return (moment.weekday() + 1) % 7


def is_within_schedule(schedules: Iterable[QueueSchedule], now: datetime) -> bool:
    """True when any active window covers `now` (already in local time)."""
    day = js_weekday(now)
    moment = now.time().replace(tzinfo=None)
    return any(window.contains(day, moment) for window in schedules)


def is_queue_accepting(
    business: Business, schedules: Iterable[QueueSchedule], now: Optional[datetime] = None
) -> bool:
    """
    Both gates must pass: the manual toggle is on AND a schedule window covers now.

    `now` may be naive (taken as UTC) or aware; it is converted to the
    business timezone before comparing against the windows.
    """
    if not business.is_queue_open:
        return False

    now = now or datetime.now(pytz.UTC)
    if now.tzinfo is None:
        now = pytz.UTC.localize(now)
    local_now = now.astimezone(business_timezone(business))
    return is_within_schedule(schedules, local_now)


def validate_windows(windows: List[dict]) -> List[dict]:
    """Normalise and validate schedule windows before they replace the stored ones."""
    cleaned = []
    for index, window in enumerate(windows):
        day = int(window.get("day_of_week", -1))
        if not 0 <= day <= 6:
            raise ValidationError(f"Window {index}: day_of_week must be between 0 and 6")
        try:
            start = parse_hhmm(window["start_time"])
            end = parse_hhmm(window["end_time"])
        except (KeyError, ValueError):
            raise ValidationError(f"Window {index}: times must be HH:MM")
        if start >= end:
            raise ValidationError(f"Window {index}: start_time must be before end_time")
        cleaned.append({
            "day_of_week": day,
            "start_time": start.strftime("%H:%M"),
            "end_time": end.strftime("%H:%M"),
            "is_active": bool(window.get("is_active", True)),
        })
    return cleaned
