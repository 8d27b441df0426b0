"""
Schemas package for the MinhaVez backend.

Pydantic models for request/response validation:
- base: Base schemas and common types
- queue: Queue entries, live snapshots, schedule windows
- reservation: Reservation booking schemas
- analytics: Dashboard metrics and goal progress
"""

from minhavez.schemas.base import BaseSchema
from minhavez.schemas.queue import (
    QueueEntryCreate,
    QueueEntryResponse,
    QueueEntryStatusResponse,
    QueueSummary,
    CancelRequest,
    TransitionRequest,
    MutationResultResponse,
    QueueStatusResponse,
    ScheduleWindow,
    ScheduleUpdate,
)
from minhavez.schemas.reservation import AvailableSlotsResponse, ReservationCreate, ReservationResponse
from minhavez.schemas.analytics import (
    QueueMetrics,
    ReservationMetrics,
    AnalyticsOverview,
    GoalProgress,
)
