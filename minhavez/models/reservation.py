"""Reservation model for scheduled bookings."""
from enum import Enum

from minhavez.models.base import SupabaseModel
from minhavez.models.queue_schedule import QueueSchedule


class ReservationStatus(str, Enum):
    """Reservation status enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    COMPLETED = "completed"


class Reservation(SupabaseModel):
    """A date/time slot booking. Same lifecycle idea as a queue entry, keyed by slot instead of rank."""
    table_name = "reservations"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.id = kwargs.get('id')
        self.business_id = kwargs.get('business_id')
        self.customer_name = kwargs.get('customer_name')
        self.customer_phone = kwargs.get('customer_phone')
        self.customer_email = kwargs.get('customer_email')
        self.party_size = kwargs.get('party_size', 1)
        self.reservation_date = kwargs.get('reservation_date')
        self.reservation_time = kwargs.get('reservation_time')
        self.status = ReservationStatus(kwargs.get('status', ReservationStatus.PENDING))
        self.notes = kwargs.get('notes')
        self.cancellation_reason = kwargs.get('cancellation_reason')
        self.created_at = kwargs.get('created_at')
        self.updated_at = kwargs.get('updated_at')


class ReservationSchedule(QueueSchedule):
    """Weekly window in which reservation slots are offered."""
    table_name = "reservation_schedule"
