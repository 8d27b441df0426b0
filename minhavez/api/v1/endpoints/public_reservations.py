"""Public (anonymous) reservation booking reached from the business link or QR code."""
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from minhavez.core.dependencies import get_reservation_service
from minhavez.schemas.reservation import AvailableSlotsResponse, ReservationCreate, ReservationResponse
from minhavez.services.reservations.service import ReservationService

router = APIRouter()


@router.get("/{business_id}/slots", response_model=AvailableSlotsResponse)
async def list_available_slots(
    business_id: str,
    reservation_date: date = Query(..., alias="date"),
    service: ReservationService = Depends(get_reservation_service),
):
    slots = await service.available_slots(business_id, reservation_date)
    return AvailableSlotsResponse(reservation_date=reservation_date, slots=slots)


@router.post("/{business_id}", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def book_reservation(
    business_id: str,
    data: ReservationCreate,
    service: ReservationService = Depends(get_reservation_service),
):
    """Create a pending reservation. 409 when bookings are off, 422 for a day or time not offered."""
    reservation = await service.book(business_id, data)
    return ReservationResponse.model_validate(reservation)
