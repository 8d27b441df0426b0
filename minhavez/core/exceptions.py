"""Domain exceptions raised by services and mapped to HTTP responses."""
from typing import Optional


class MinhaVezError(Exception):
    """Base error carrying an HTTP status and a machine-readable code."""

    status_code: int = 400
    code: str = "error"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self):
        return {"detail": self.message, "code": self.code}


class NotFoundError(MinhaVezError):
    status_code = 404
    code = "not_found"


class QueueClosedError(MinhaVezError):
    """The public queue form is not accepting entries right now."""

    status_code = 409
    code = "queue_closed"


class ReservationsClosedError(MinhaVezError):
    status_code = 409
    code = "reservations_closed"


class InvalidTransitionError(MinhaVezError):
    """The requested action is not legal from the entry's current status."""

    status_code = 409
    code = "invalid_transition"


class StaleTransitionError(MinhaVezError):
    """The row changed status between read and conditional write."""

    status_code = 409
    code = "stale_transition"


class CancellationReasonRequiredError(MinhaVezError):
    status_code = 422
    code = "cancellation_reason_required"


class ValidationError(MinhaVezError):
    status_code = 422
    code = "validation_error"


class DatabaseError(MinhaVezError):
    """Wraps failures coming back from the hosted database."""

    status_code = 502
    code = "database_error"
