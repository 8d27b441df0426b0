"""Live rank and wait estimate for a single queue entry."""
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from minhavez.core.exceptions import MinhaVezError
from minhavez.models.queue_entry import QueueEntry, QueueStatus
from minhavez.services.queue.repository import QueueRepository
from minhavez.services.queue.wait_estimator import WaitEstimator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueSnapshot:
    entry_id: str
    status: QueueStatus
    position: Optional[int]
    rank: Optional[int]
    people_ahead: int
    estimated_wait_minutes: int
    sequence: int = 0

    def same_numbers(self, other: Optional["QueueSnapshot"]) -> bool:
        return other is not None and (
            self.status, self.rank, self.estimated_wait_minutes
        ) == (other.status, other.rank, other.estimated_wait_minutes)

    def to_message(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["type"] = "position_update"
        return data


async def compute_snapshot(
    repository: QueueRepository,
    estimator: WaitEstimator,
    entry: QueueEntry,
    sequence: int = 0,
) -> QueueSnapshot:
    """Count waiting entries ahead and derive rank/wait. Read-only."""
    if entry.status != QueueStatus.WAITING:
        return QueueSnapshot(
            entry_id=str(entry.id),
            status=entry.status,
            position=entry.position,
            rank=None,
            people_ahead=0,
            estimated_wait_minutes=0,
            sequence=sequence,
        )

    ahead = await repository.count_waiting_ahead(entry.business_id, entry.position, entry.id)
    return QueueSnapshot(
        entry_id=str(entry.id),
        status=entry.status,
        position=entry.position,
        rank=estimator.rank(ahead),
        people_ahead=ahead,
        estimated_wait_minutes=estimator.estimate(ahead),
        sequence=sequence,
    )


class PositionRecalculator:
    """
    Keeps one entry's rank/wait current as change events arrive.

    Each recalculation takes the next sequence number. When overlapping
    recalculations finish out of order, a result older than the last applied
    one is dropped. A failed fetch keeps the previous snapshot.
    """

    def __init__(self, repository: QueueRepository, estimator: WaitEstimator, entry_id: str):
        self.repository = repository
        self.estimator = estimator
        self.entry_id = entry_id
        self.snapshot: Optional[QueueSnapshot] = None
        self._issued = 0
        self._applied = 0

    def next_sequence(self) -> int:
        self._issued += 1
        return self._issued

    async def recalculate(self) -> Optional[QueueSnapshot]:
        sequence = self.next_sequence()
        try:
            entry = await self.repository.get_entry(self.entry_id)
            if entry is None:
                logger.warning(f"Queue entry {self.entry_id} disappeared; keeping last snapshot")
                return self.snapshot
            snapshot = await compute_snapshot(self.repository, self.estimator, entry, sequence)
        except MinhaVezError as e:
            logger.warning(f"Recalculation for entry {self.entry_id} failed, showing stale data: {e}")
            return self.snapshot
        return self.apply(snapshot)

    def apply(self, snapshot: QueueSnapshot) -> Optional[QueueSnapshot]:
        """Adopt `snapshot` unless a newer one was already applied."""
        if snapshot.sequence <= self._applied:
            logger.debug(
                f"Discarding stale snapshot #{snapshot.sequence} for entry {self.entry_id} "
                f"(applied #{self._applied})"
            )
            return self.snapshot
        self._applied = snapshot.sequence
        self.snapshot = snapshot
        return snapshot
