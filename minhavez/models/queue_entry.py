"""Queue entry model for the live walk-in queue."""
from enum import Enum
from typing import Optional

from minhavez.models.base import SupabaseModel


class QueueStatus(str, Enum):
    """Queue entry status enumeration."""
    WAITING = "waiting"
    CALLED = "called"
    ATTENDING = "attending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def is_terminal(self) -> bool:
        return self in (QueueStatus.COMPLETED, QueueStatus.CANCELLED, QueueStatus.NO_SHOW)


class QueueEntry(SupabaseModel):
    """
    One customer's place in a single business's queue.

    `position` is assigned at insertion and never renumbered, so it can have
    gaps. A customer's rank is the number of waiting entries with a lower
    position plus one; never read `position` as the rank.
    """
    table_name = "queue_entries"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.id = kwargs.get('id')
        self.business_id = kwargs.get('business_id')
        self.customer_name = kwargs.get('customer_name')
        self.customer_phone = kwargs.get('customer_phone')
        self.customer_email = kwargs.get('customer_email')
        self.party_size = kwargs.get('party_size', 1)
        self.position: Optional[int] = kwargs.get('position')
        self.status = QueueStatus(kwargs.get('status', QueueStatus.WAITING))
        self.notes = kwargs.get('notes')
        self.selected_service = kwargs.get('selected_service')
        self.cancellation_reason = kwargs.get('cancellation_reason')
        self.estimated_wait_time = kwargs.get('estimated_wait_time')
        self.joined_at = kwargs.get('joined_at')
        self.called_at = kwargs.get('called_at')
        self.attended_at = kwargs.get('attended_at')
        self.completed_at = kwargs.get('completed_at')
        self.created_at = kwargs.get('created_at')
        self.updated_at = kwargs.get('updated_at')

    def __repr__(self):
        return f"<QueueEntry {self.customer_name} #{self.position} {self.status.value}>"
