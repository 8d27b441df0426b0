"""Queue operations used by the public page and the staff dashboard."""
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from minhavez.core.exceptions import NotFoundError, QueueClosedError
from minhavez.models.business import Business
from minhavez.models.queue_entry import QueueEntry, QueueStatus
from minhavez.models.queue_schedule import QueueSchedule
from minhavez.schemas.queue import QueueEntryCreate
from minhavez.services.queue.availability import is_queue_accepting, validate_windows
from minhavez.services.queue.recalculator import QueueSnapshot, compute_snapshot
from minhavez.services.queue.repository import QueueRepository
from minhavez.services.queue.wait_estimator import WaitEstimator

logger = logging.getLogger(__name__)


class QueueService:
    """Reads and non-transition writes for a business's queue."""

    def __init__(
        self,
        repository: QueueRepository,
        estimator: WaitEstimator,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.repository = repository
        self.estimator = estimator
        self.clock = clock

    async def require_business(self, business_id: str) -> Business:
        business = await self.repository.get_business(business_id)
        if business is None:
            raise NotFoundError("Business not found")
        return business

    async def availability(self, business: Business) -> Tuple[bool, List[QueueSchedule]]:
        schedules = await self.repository.list_schedule(business.id)
        return is_queue_accepting(business, schedules, self.clock()), schedules

    async def get_summary(self, business_id: str) -> dict:
        """Public page header: queue length and the wait a newcomer would face."""
        business = await self.require_business(business_id)
        queue_length = await self.repository.count_waiting(business_id)
        is_open, _ = await self.availability(business)
        return {
            "business_id": str(business.id),
            "business_name": business.name,
            "business_type": business.business_type,
            "address": business.address,
            "queue_length": queue_length,
            "estimated_wait_minutes": self.estimator.estimate(queue_length),
            "is_open": is_open,
        }

    async def join(self, business_id: str, data: QueueEntryCreate) -> QueueEntry:
        business = await self.require_business(business_id)
        is_open, _ = await self.availability(business)
        if not is_open:
            raise QueueClosedError("This queue is not accepting new customers right now")

        waiting = await self.repository.count_waiting(business_id)
        position = await self.repository.next_position(business_id)
        payload = {
            **data.model_dump(exclude_none=True),
            "business_id": business_id,
            "status": QueueStatus.WAITING.value,
            "position": position,
            "estimated_wait_time": self.estimator.estimate(waiting),
            "joined_at": self.clock().isoformat(),
        }
        entry = await self.repository.insert_entry(payload)
        logger.info(f"Customer joined queue of business {business_id} at position {position}")
        return entry

    async def get_entry_status(self, entry_id: str) -> Tuple[QueueEntry, Optional[Business], QueueSnapshot]:
        entry = await self.repository.get_entry(entry_id)
        if entry is None:
            raise NotFoundError("Queue entry not found")
        business = await self.repository.get_business(entry.business_id)
        snapshot = await compute_snapshot(self.repository, self.estimator, entry)
        return entry, business, snapshot

    async def waiting_list(self, business_id: str) -> List[QueueEntry]:
        return await self.repository.list_waiting(business_id)

    async def active_list(self, business_id: str) -> List[QueueEntry]:
        return await self.repository.list_active(business_id)

    async def toggle_open(self, business_id: str) -> Business:
        business = await self.require_business(business_id)
        updated = await self.repository.set_queue_open(business_id, not business.is_queue_open)
        if updated is None:
            raise NotFoundError("Business not found")
        logger.info(f"Queue for business {business_id} is now {'open' if updated.is_queue_open else 'closed'}")
        return updated

    async def get_schedule(self, business_id: str) -> List[QueueSchedule]:
        return await self.repository.list_schedule(business_id)

    async def replace_schedule(self, business_id: str, windows: List[dict]) -> List[QueueSchedule]:
        cleaned = validate_windows(windows)
        return await self.repository.replace_schedule(business_id, cleaned)
