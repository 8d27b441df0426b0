"""Public (anonymous) queue endpoints: summary, join, wait view, self-cancel."""
from fastapi import APIRouter, Depends, status

from minhavez.api.v1.responses import mutation_response
from minhavez.core.dependencies import get_dispatcher, get_queue_service
from minhavez.schemas.queue import (
    CancelRequest,
    MutationResultResponse,
    QueueEntryCreate,
    QueueEntryResponse,
    QueueEntryStatusResponse,
    QueueSummary,
)
from minhavez.services.queue.dispatcher import StatusTransitionDispatcher
from minhavez.services.queue.service import QueueService
from minhavez.services.queue.state_machine import QueueAction

router = APIRouter()

# Offered by the customer cancel dialog; free text is sent for "Outro motivo".
CANCEL_REASONS = [
    "Não posso mais esperar",
    "Mudança de planos",
    "Tempo de espera muito longo",
]


@router.get("/cancel-reasons")
async def list_cancel_reasons():
    return {"reasons": CANCEL_REASONS}


@router.get("/{business_id}", response_model=QueueSummary)
async def get_queue_summary(
    business_id: str,
    service: QueueService = Depends(get_queue_service),
):
    """Business header for the public page with queue length and current wait."""
    return await service.get_summary(business_id)


@router.post("/{business_id}/entries", response_model=QueueEntryResponse, status_code=status.HTTP_201_CREATED)
async def join_queue(
    business_id: str,
    data: QueueEntryCreate,
    service: QueueService = Depends(get_queue_service),
):
    """Join the queue. Rejected with 409 when the queue is closed or outside its schedule."""
    entry = await service.join(business_id, data)
    return QueueEntryResponse.model_validate(entry)


@router.get("/entries/{entry_id}", response_model=QueueEntryStatusResponse)
async def get_entry_status(
    entry_id: str,
    service: QueueService = Depends(get_queue_service),
):
    entry, business, snapshot = await service.get_entry_status(entry_id)
    return QueueEntryStatusResponse(
        entry=QueueEntryResponse.model_validate(entry),
        business_name=business.name if business else None,
        current_position=snapshot.rank,
        estimated_wait_minutes=snapshot.estimated_wait_minutes,
    )


@router.post("/entries/{entry_id}/cancel", response_model=MutationResultResponse)
async def cancel_entry(
    entry_id: str,
    body: CancelRequest,
    dispatcher: StatusTransitionDispatcher = Depends(get_dispatcher),
):
    """Customer leaves the queue. A reason is required."""
    result = await dispatcher.dispatch(entry_id, QueueAction.CANCEL, reason=body.reason)
    return mutation_response(result)
