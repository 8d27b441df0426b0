"""Weekly opening windows for the public queue."""
from datetime import time

from minhavez.models.base import SupabaseModel


def parse_hhmm(value) -> time:
    """Parse 'HH:MM' or 'HH:MM:SS' (Postgres `time`) into a time."""
    if isinstance(value, time):
        return value
    parts = [int(p) for p in str(value).split(":")]
    while len(parts) < 3:
        parts.append(0)
    return time(parts[0], parts[1], parts[2])


class QueueSchedule(SupabaseModel):
    """
    One (day_of_week, start_time, end_time) window.

    day_of_week follows the JavaScript convention stored by the dashboard:
    0 = Sunday .. 6 = Saturday.
    """
    table_name = "queue_schedule"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.id = kwargs.get('id')
        self.business_id = kwargs.get('business_id')
        self.day_of_week = int(kwargs.get('day_of_week', 0))
        self.start_time = parse_hhmm(kwargs.get('start_time', "00:00"))
        self.end_time = parse_hhmm(kwargs.get('end_time', "00:00"))
        self.is_active = kwargs.get('is_active', True)

    def contains(self, day_of_week: int, moment: time) -> bool:
        """True when the window is active and covers the given weekday/time (end exclusive)."""
        return (
            bool(self.is_active)
            and self.day_of_week == day_of_week
            and self.start_time <= moment < self.end_time
        )
