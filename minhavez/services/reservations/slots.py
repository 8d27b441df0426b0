"""Bookable time slots derived from the weekly reservation schedule."""
from datetime import date, time
from typing import Iterable, List

from minhavez.models.queue_schedule import parse_hhmm
from minhavez.models.reservation import ReservationSchedule

SLOT_MINUTES = 30


def weekday_of(day: date) -> int:
    """Sunday = 0 .. Saturday = 6."""
    return day.isoweekday() % 7


def generate_slots(schedules: Iterable[ReservationSchedule], day: date) -> List[time]:
    """Every SLOT_MINUTES start inside an active window for `day`, sorted and de-duplicated."""
    weekday = weekday_of(day)
    slots = set()
    for window in schedules:
        if not window.is_active or window.day_of_week != weekday:
            continue
        start = window.start_time.hour * 60 + window.start_time.minute
        end = window.end_time.hour * 60 + window.end_time.minute
        for minutes in range(start, end, SLOT_MINUTES):
            slots.add(time(minutes // 60, minutes % 60))
    return sorted(slots)


def is_slot_offered(schedules: Iterable[ReservationSchedule], day: date, requested) -> bool:
    try:
        moment = parse_hhmm(requested)
    except ValueError:
        return False
    return moment in generate_slots(schedules, day)
