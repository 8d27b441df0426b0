"""Analytics and goal schemas."""
from datetime import date
from typing import Optional

from pydantic import BaseModel


class QueueMetrics(BaseModel):
    total: int = 0
    completed: int = 0
    cancelled: int = 0
    no_show: int = 0
    waiting: int = 0
    avg_wait_time: int = 0  # minutes
    completion_rate: float = 0.0  # percent


class ReservationMetrics(BaseModel):
    total: int = 0
    confirmed: int = 0
    pending: int = 0
    cancelled: int = 0
    no_show: int = 0
    confirmation_rate: float = 0.0  # percent


class AnalyticsOverview(BaseModel):
    queue: QueueMetrics
    reservations: ReservationMetrics


class GoalProgress(BaseModel):
    goal_id: str
    goal_type: str
    period_type: str
    target_value: float
    current_value: float
    progress_percent: float
    start_date: Optional[date] = None
    end_date: Optional[date] = None
