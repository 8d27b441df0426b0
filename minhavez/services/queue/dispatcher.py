"""Applies staff actions to queue entries and reports pending/confirmed/failed results."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from minhavez.core.exceptions import (
    MinhaVezError,
    NotFoundError,
    StaleTransitionError,
)
from minhavez.models.queue_entry import QueueEntry
from minhavez.services.queue.repository import QueueRepository
from minhavez.services.queue.state_machine import (
    QUEUE_TRANSITIONS,
    QueueAction,
    build_transition_changes,
)

logger = logging.getLogger(__name__)


class MutationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class MutationResult:
    """Outcome of one staff action; the dashboard rolls back optimistic state on FAILED."""
    action: str
    entry_id: Optional[str]
    status: MutationStatus = MutationStatus.PENDING
    entry: Optional[QueueEntry] = None
    error: Optional[MinhaVezError] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == MutationStatus.CONFIRMED

    def to_message(self) -> Dict[str, Any]:
        message = {
            "type": "mutation",
            "action": self.action,
            "entry_id": self.entry_id,
            "status": self.status.value,
        }
        if self.entry is not None:
            message["entry"] = self.entry.to_supabase_dict()
        if self.error is not None:
            message["error"] = self.error.to_dict()
        return message


MutationListener = Callable[[str, MutationResult], Awaitable[None]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusTransitionDispatcher:
    """
    Maps staff actions to status + timestamp updates.

    Legality is checked against the transition table before writing, and the
    write itself is conditional on the status that was read, so two staff
    members acting on the same entry cannot both succeed.
    """

    def __init__(
        self,
        repository: QueueRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
        listener: Optional[MutationListener] = None,
    ):
        self.repository = repository
        self.clock = clock
        self.listener = listener

    async def dispatch(
        self,
        entry_id: str,
        action: QueueAction,
        *,
        reason: Optional[str] = None,
        business_id: Optional[str] = None,
    ) -> MutationResult:
        """
        Apply `action` to the entry. Never raises for domain failures;
        the result carries the error instead.
        """
        action = QueueAction(action)
        result = MutationResult(action=action.value, entry_id=entry_id)
        entry: Optional[QueueEntry] = None

        try:
            entry = await self.repository.get_entry(entry_id)
            if entry is None or (business_id and str(entry.business_id) != str(business_id)):
                raise NotFoundError("Queue entry not found")

            changes = build_transition_changes(
                QUEUE_TRANSITIONS, entry.status, action, now=self.clock(), reason=reason
            )
            await self._publish(entry.business_id, result)

            updated = await self.repository.update_entry_if_status(entry_id, entry.status, changes)
            if updated is None:
                raise StaleTransitionError(
                    "Entry changed before this action was applied; refresh and try again"
                )

            result.entry = updated
            result.status = MutationStatus.CONFIRMED
            logger.info(
                f"Queue entry {entry_id} {entry.status.value} -> {updated.status.value} ({action.value})"
            )

        except MinhaVezError as e:
            result.status = MutationStatus.FAILED
            result.error = e
            log = logger.error if e.status_code >= 500 else logger.warning
            log(f"Action {action.value} on entry {entry_id} failed: {e.message}")

        if entry is not None:
            await self._publish(entry.business_id, result)
        return result

    async def call_next(self, business_id: str) -> MutationResult:
        """Call the waiting entry with the lowest position."""
        try:
            entry = await self.repository.next_waiting(business_id)
        except MinhaVezError as e:
            return MutationResult(
                action=QueueAction.CALL.value, entry_id=None, status=MutationStatus.FAILED, error=e
            )
        if entry is None:
            return MutationResult(
                action=QueueAction.CALL.value,
                entry_id=None,
                status=MutationStatus.FAILED,
                error=NotFoundError("Nobody is waiting in the queue", code="queue_empty"),
            )
        return await self.dispatch(entry.id, QueueAction.CALL, business_id=business_id)

    async def _publish(self, business_id, result: MutationResult) -> None:
        if not self.listener:
            return
        try:
            await self.listener(str(business_id), result)
        except Exception as e:
            logger.warning(f"Mutation listener failed for business {business_id}: {e}")
