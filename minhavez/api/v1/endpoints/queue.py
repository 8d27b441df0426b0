"""Staff queue endpoints for the business dashboard."""
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from minhavez.api.v1.responses import mutation_response
from minhavez.core.dependencies import get_current_business, get_dispatcher, get_queue_service
from minhavez.models.business import Business
from minhavez.schemas.queue import (
    MutationResultResponse,
    QueueEntryResponse,
    QueueStatusResponse,
    QueueSummary,
    ScheduleUpdate,
    ScheduleWindow,
    TransitionRequest,
)
from minhavez.services.queue.dispatcher import StatusTransitionDispatcher
from minhavez.services.queue.service import QueueService
from minhavez.services.queue.state_machine import QueueAction

router = APIRouter()


@router.get("", response_model=List[QueueEntryResponse])
async def list_queue(
    active: bool = Query(False, description="Include called and attending entries"),
    business: Business = Depends(get_current_business),
    service: QueueService = Depends(get_queue_service),
):
    """Waiting entries in position order."""
    if active:
        entries = await service.active_list(business.id)
    else:
        entries = await service.waiting_list(business.id)
    return [QueueEntryResponse.model_validate(entry) for entry in entries]


@router.get("/summary", response_model=QueueSummary)
async def get_summary(
    business: Business = Depends(get_current_business),
    service: QueueService = Depends(get_queue_service),
):
    return await service.get_summary(business.id)


@router.post("/call-next", response_model=MutationResultResponse)
async def call_next(
    business: Business = Depends(get_current_business),
    dispatcher: StatusTransitionDispatcher = Depends(get_dispatcher),
):
    """Call the waiting customer with the lowest position."""
    return mutation_response(await dispatcher.call_next(business.id))


@router.post("/entries/{entry_id}/{action}", response_model=MutationResultResponse)
async def apply_action(
    entry_id: str,
    action: QueueAction,
    body: Optional[TransitionRequest] = Body(None),
    business: Business = Depends(get_current_business),
    dispatcher: StatusTransitionDispatcher = Depends(get_dispatcher),
):
    """call / attend / complete / cancel / no_show. `cancel` needs a reason."""
    result = await dispatcher.dispatch(
        entry_id,
        action,
        reason=body.reason if body else None,
        business_id=business.id,
    )
    return mutation_response(result)


@router.post("/toggle", response_model=QueueStatusResponse)
async def toggle_queue(
    business: Business = Depends(get_current_business),
    service: QueueService = Depends(get_queue_service),
):
    """Flip the manual open/closed switch."""
    updated = await service.toggle_open(business.id)
    is_accepting, _ = await service.availability(updated)
    return QueueStatusResponse(
        is_open=bool(updated.is_queue_open),
        is_accepting=is_accepting,
        message="Fila aberta" if updated.is_queue_open else "Fila fechada",
    )


@router.get("/status", response_model=QueueStatusResponse)
async def get_queue_status(
    business: Business = Depends(get_current_business),
    service: QueueService = Depends(get_queue_service),
):
    """Manual switch plus whether the schedule lets customers join right now."""
    is_accepting, _ = await service.availability(business)
    message = None
    if business.is_queue_open and not is_accepting:
        message = "Fora do horário de funcionamento"
    return QueueStatusResponse(
        is_open=bool(business.is_queue_open), is_accepting=is_accepting, message=message
    )


@router.get("/schedule", response_model=List[ScheduleWindow])
async def get_schedule(
    business: Business = Depends(get_current_business),
    service: QueueService = Depends(get_queue_service),
):
    return [ScheduleWindow.from_schedule(s) for s in await service.get_schedule(business.id)]


@router.put("/schedule", response_model=List[ScheduleWindow])
async def replace_schedule(
    data: ScheduleUpdate,
    business: Business = Depends(get_current_business),
    service: QueueService = Depends(get_queue_service),
):
    """Replace every weekly window of the business."""
    windows = [window.model_dump() for window in data.windows]
    return [ScheduleWindow.from_schedule(s) for s in await service.replace_schedule(business.id, windows)]
