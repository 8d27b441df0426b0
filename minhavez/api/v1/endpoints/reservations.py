"""Reservation endpoints for the business dashboard."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from minhavez.core.dependencies import get_current_business, get_reservation_service
from minhavez.models.business import Business
from minhavez.models.reservation import ReservationStatus
from minhavez.schemas.queue import ScheduleUpdate, ScheduleWindow, TransitionRequest
from minhavez.schemas.reservation import ReservationCreate, ReservationResponse
from minhavez.services.reservations.service import ReservationAction, ReservationService

router = APIRouter()


@router.get("", response_model=List[ReservationResponse])
async def list_reservations(
    reservation_date: Optional[date] = Query(None, alias="date"),
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    business: Business = Depends(get_current_business),
    service: ReservationService = Depends(get_reservation_service),
):
    reservations = await service.list(
        business.id,
        reservation_date.isoformat() if reservation_date else None,
        status_filter.value if status_filter else None,
    )
    return [ReservationResponse.model_validate(r) for r in reservations]


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    data: ReservationCreate,
    business: Business = Depends(get_current_business),
    service: ReservationService = Depends(get_reservation_service),
):
    reservation = await service.create(business.id, data)
    return ReservationResponse.model_validate(reservation)


@router.post("/toggle")
async def toggle_reservations(
    business: Business = Depends(get_current_business),
    service: ReservationService = Depends(get_reservation_service),
):
    updated = await service.toggle_accepting(business.id)
    return {"is_accepting_reservations": bool(updated.is_accepting_reservations)}


@router.get("/schedule", response_model=List[ScheduleWindow])
async def get_reservation_schedule(
    business: Business = Depends(get_current_business),
    service: ReservationService = Depends(get_reservation_service),
):
    return [ScheduleWindow.from_schedule(s) for s in await service.get_schedule(business.id)]


@router.put("/schedule", response_model=List[ScheduleWindow])
async def replace_reservation_schedule(
    data: ScheduleUpdate,
    business: Business = Depends(get_current_business),
    service: ReservationService = Depends(get_reservation_service),
):
    """Replace the weekly windows in which customers can book."""
    windows = [window.model_dump() for window in data.windows]
    return [ScheduleWindow.from_schedule(s) for s in await service.replace_schedule(business.id, windows)]


@router.post("/{reservation_id}/{action}", response_model=ReservationResponse)
async def apply_reservation_action(
    reservation_id: str,
    action: ReservationAction,
    body: Optional[TransitionRequest] = Body(None),
    business: Business = Depends(get_current_business),
    service: ReservationService = Depends(get_reservation_service),
):
    """confirm / complete / cancel / no_show. `cancel` needs a reason."""
    reservation = await service.transition(
        business.id, reservation_id, action, reason=body.reason if body else None
    )
    return ReservationResponse.model_validate(reservation)
