"""Reservation schemas."""
from datetime import date
from typing import List, Optional

from pydantic import Field

from minhavez.models.reservation import ReservationStatus
from minhavez.schemas.base import BaseSchema, IDSchema, TimestampSchema


class ReservationBase(BaseSchema):
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=20)
    customer_email: Optional[str] = None
    party_size: int = Field(1, ge=1, le=50)
    reservation_date: date
    reservation_time: str = Field(..., pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    notes: Optional[str] = Field(None, max_length=1000)


class ReservationCreate(ReservationBase):
    pass


class ReservationResponse(ReservationBase, IDSchema, TimestampSchema):
    business_id: str
    status: ReservationStatus
    cancellation_reason: Optional[str] = None


class AvailableSlotsResponse(BaseSchema):
    """Bookable HH:MM starts for one day; empty when nothing is offered."""
    reservation_date: date
    slots: List[str] = []
