"""
Database models package.

This file makes it easy to import all models at once.
"""

from .base import SupabaseModel
from .business import Business, SubscriptionStatus
from .queue_entry import QueueEntry, QueueStatus
from .queue_schedule import QueueSchedule
from .reservation import Reservation, ReservationSchedule, ReservationStatus
from .business_goal import BusinessGoal, GoalType, PeriodType

__all__ = [
    "SupabaseModel",
    "Business",
    "SubscriptionStatus",
    "QueueEntry",
    "QueueStatus",
    "QueueSchedule",
    "Reservation",
    "ReservationSchedule",
    "ReservationStatus",
    "BusinessGoal",
    "GoalType",
    "PeriodType",
]
