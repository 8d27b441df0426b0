"""Shared response helpers for endpoints that report mutation results."""
from fastapi.responses import JSONResponse

from minhavez.schemas.queue import MutationResultResponse, QueueEntryResponse
from minhavez.services.queue.dispatcher import MutationResult


def mutation_response(result: MutationResult) -> JSONResponse:
    """200 with the updated entry, or the error's status with the same body shape."""
    body = MutationResultResponse(
        status=result.status.value,
        action=result.action,
        entry_id=str(result.entry_id) if result.entry_id is not None else None,
        entry=QueueEntryResponse.model_validate(result.entry) if result.entry is not None else None,
        message=result.error.message if result.error else None,
        error_code=result.error.code if result.error else None,
    )
    status_code = 200 if result.ok else result.error.status_code
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
