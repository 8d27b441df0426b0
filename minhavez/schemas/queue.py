"""Queue schemas for API validation."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from minhavez.models.queue_entry import QueueStatus
from minhavez.schemas.base import BaseSchema, IDSchema, TimestampSchema


class QueueEntryBase(BaseSchema):
    """Base queue entry fields."""
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=20)
    customer_email: Optional[str] = None
    party_size: int = Field(1, ge=1, le=50)
    notes: Optional[str] = Field(None, max_length=1000)
    selected_service: Optional[str] = None

    @field_validator("customer_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("customer_name must not be blank")
        return value


class QueueEntryCreate(QueueEntryBase):
    """Public join-queue form."""
    pass


class QueueEntryResponse(QueueEntryBase, IDSchema, TimestampSchema):
    """Queue entry response with all fields."""
    business_id: str
    status: QueueStatus
    position: Optional[int] = None
    estimated_wait_time: Optional[int] = None  # minutes, snapshot at join time
    cancellation_reason: Optional[str] = None
    joined_at: Optional[datetime] = None
    called_at: Optional[datetime] = None
    attended_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "id": "5b8c7f0e-6a43-4b8e-9d1f-0f3c2a1e9b77",
                "business_id": "0d4e1f2a-5c6b-4a7d-8e9f-1a2b3c4d5e6f",
                "customer_name": "Maria Silva",
                "customer_phone": "+5511999999999",
                "party_size": 2,
                "status": "waiting",
                "position": 12,
                "estimated_wait_time": 30,
                "joined_at": "2024-01-01T10:00:00Z",
            }
        }
    )



class QueueEntryStatusResponse(BaseModel):
    """Public wait-view payload: the entry plus its live numbers."""
    entry: QueueEntryResponse
    business_name: Optional[str] = None
    current_position: Optional[int] = None
    estimated_wait_minutes: int = 0


class QueueSummary(BaseModel):
    """Public queue page header."""
    business_id: str
    business_name: str
    business_type: Optional[str] = None
    address: Optional[str] = None
    queue_length: int
    estimated_wait_minutes: int
    is_open: bool


class CancelRequest(BaseModel):
    """Cancellation from staff or the customer. Reason is mandatory."""
    reason: Optional[str] = Field(None, max_length=500)


class TransitionRequest(BaseModel):
    """Body for staff status actions; only `cancel` uses the reason."""
    reason: Optional[str] = Field(None, max_length=500)


class MutationResultResponse(BaseModel):
    """Outcome of a staff action."""
    status: str
    action: str
    entry_id: Optional[str] = None
    entry: Optional[QueueEntryResponse] = None
    message: Optional[str] = None
    error_code: Optional[str] = None


class QueueStatusResponse(BaseModel):
    is_open: bool
    is_accepting: bool
    message: Optional[str] = None


class ScheduleWindow(BaseSchema):
    """One weekly opening window; day_of_week 0 = Sunday."""
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: str = Field(..., pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    end_time: str = Field(..., pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    is_active: bool = True

    @classmethod
    def from_schedule(cls, schedule) -> "ScheduleWindow":
        """Build from a stored QueueSchedule / ReservationSchedule row."""
        return cls(
            day_of_week=schedule.day_of_week,
            start_time=schedule.start_time.strftime("%H:%M"),
            end_time=schedule.end_time.strftime("%H:%M"),
            is_active=bool(schedule.is_active),
        )


class ScheduleUpdate(BaseModel):
    windows: List[ScheduleWindow] = []
