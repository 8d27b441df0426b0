"""Business goal model for dashboard targets."""
from enum import Enum

from minhavez.models.base import SupabaseModel


class GoalType(str, Enum):
    ATTENDANCE = "attendance"
    AVG_TIME = "avg_time"
    RESERVATIONS_SERVED = "reservations_served"
    RESERVATIONS_PENDING = "reservations_pending"
    QUEUE_SERVED = "queue_served"
    QUEUE_PENDING = "queue_pending"


class PeriodType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    BIANNUAL = "biannual"
    ANNUAL = "annual"


class BusinessGoal(SupabaseModel):
    """A target value for one metric over a date range."""
    table_name = "business_goals"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.id = kwargs.get('id')
        self.business_id = kwargs.get('business_id')
        self.goal_type = GoalType(kwargs.get('goal_type'))
        self.period_type = PeriodType(kwargs.get('period_type', PeriodType.DAILY))
        self.target_value = kwargs.get('target_value', 0)
        self.current_value = kwargs.get('current_value', 0)
        self.start_date = kwargs.get('start_date')
        self.end_date = kwargs.get('end_date')
        self.is_active = kwargs.get('is_active', True)
