"""Business (tenant) model for Supabase operations."""
import enum
from typing import Optional

from minhavez.models.base import SupabaseModel


class SubscriptionStatus(str, enum.Enum):
    """Subscription state as mirrored from the billing provider."""
    TRIAL = "trial"
    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"


class Business(SupabaseModel):
    """
    Tenant root. Owns queue entries, reservations and schedules.
    """
    table_name = "businesses"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.id = kwargs.get('id')
        self.user_id = kwargs.get('user_id')
        self.name = kwargs.get('name')
        self.business_type = kwargs.get('business_type')
        self.address = kwargs.get('address')
        self.phone = kwargs.get('phone')
        self.country = kwargs.get('country', 'BR')
        self.timezone: Optional[str] = kwargs.get('timezone')
        self.is_queue_open = kwargs.get('is_queue_open', True)
        self.is_accepting_reservations = kwargs.get('is_accepting_reservations', True)
        self.subscription_status = kwargs.get('subscription_status', SubscriptionStatus.TRIAL.value)
        self.trial_ends_at = kwargs.get('trial_ends_at')
        self.created_at = kwargs.get('created_at')
        self.updated_at = kwargs.get('updated_at')
