"""Realtime watchers that keep a customer view and a staff dashboard current."""
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional

from minhavez.core.exceptions import MinhaVezError
from minhavez.models.queue_entry import QueueStatus
from minhavez.services.notifications.call_trigger import CallNotificationTrigger
from minhavez.services.queue.recalculator import PositionRecalculator, QueueSnapshot
from minhavez.services.queue.repository import QUEUE_TABLE
from minhavez.services.queue.service import QueueService
from minhavez.services.realtime.listener import (
    ChangeEvent,
    RealtimeChangeListener,
    Subscription,
    business_filter,
    entry_filter,
)

logger = logging.getLogger(__name__)

MessageSink = Callable[[Dict[str, Any]], Awaitable[None]]


def _channel(prefix: str, key) -> str:
    return f"{prefix}-{key}-{uuid.uuid4().hex[:8]}"


class EntryWatcher:
    """
    Customer view of one entry.

    Two subscriptions: the entry's own row (status edges, so the call alert
    fires) and every row of the business (anyone ahead leaving changes the
    rank). Both end in a recalculation whose snapshot goes to `sink`.
    """

    def __init__(
        self,
        listener: RealtimeChangeListener,
        recalculator: PositionRecalculator,
        trigger: CallNotificationTrigger,
        sink: MessageSink,
        business_id: str,
    ):
        self.listener = listener
        self.recalculator = recalculator
        self.trigger = trigger
        self.sink = sink
        self.business_id = str(business_id)
        self.last_status: Optional[QueueStatus] = None
        self._sent: Optional[QueueSnapshot] = None
        self._subscriptions: List[Subscription] = []

    @property
    def entry_id(self) -> str:
        return str(self.recalculator.entry_id)

    async def start(self) -> Optional[QueueSnapshot]:
        snapshot = await self.refresh()
        await self.trigger.prepare()

        self._subscriptions.append(await self.listener.subscribe(
            table=QUEUE_TABLE,
            filter=entry_filter(self.entry_id),
            callback=self.on_entry_change,
            channel_name=_channel("queue-entry", self.entry_id),
        ))
        self._subscriptions.append(await self.listener.subscribe(
            table=QUEUE_TABLE,
            filter=business_filter(self.business_id),
            callback=self.on_queue_change,
            channel_name=_channel("queue-position", self.business_id),
        ))
        return snapshot

    async def stop(self) -> None:
        for subscription in self._subscriptions:
            await subscription.unsubscribe()
        self._subscriptions = []

    async def on_entry_change(self, change: ChangeEvent) -> None:
        await self.observe_status(change.record.get("status"))
        await self.refresh()

    async def on_queue_change(self, change: ChangeEvent) -> None:
        await self.refresh()

    async def observe_status(self, status) -> bool:
        """Record the latest status; fires the call alert on waiting -> called."""
        if status is None:
            return False
        status = QueueStatus(status)
        previous, self.last_status = self.last_status, status
        if previous == status:
            return False
        return await self.trigger.on_status_change(previous, status)

    async def refresh(self) -> Optional[QueueSnapshot]:
        snapshot = await self.recalculator.recalculate()
        if snapshot is None or snapshot is self._sent:
            return snapshot
        self._sent = snapshot
        await self.observe_status(snapshot.status)
        try:
            await self.sink(snapshot.to_message())
        except Exception as e:
            logger.warning(f"Could not deliver snapshot for entry {self.entry_id}: {e}")
        return snapshot


class BusinessQueueWatcher:
    """Staff view: any change in the business's queue re-fetches the list and summary."""

    def __init__(
        self,
        listener: RealtimeChangeListener,
        service: QueueService,
        business_id: str,
        sink: MessageSink,
    ):
        self.listener = listener
        self.service = service
        self.business_id = str(business_id)
        self.sink = sink
        self._subscription: Optional[Subscription] = None

    async def start(self) -> None:
        await self.refresh()
        self._subscription = await self.listener.subscribe(
            table=QUEUE_TABLE,
            filter=business_filter(self.business_id),
            callback=self.on_change,
            channel_name=_channel("queue-dashboard", self.business_id),
        )

    async def stop(self) -> None:
        if self._subscription is not None:
            await self._subscription.unsubscribe()
            self._subscription = None

    async def on_change(self, change: ChangeEvent) -> None:
        await self.refresh()

    async def refresh(self) -> Optional[Dict[str, Any]]:
        try:
            entries = await self.service.active_list(self.business_id)
            summary = await self.service.get_summary(self.business_id)
        except MinhaVezError as e:
            logger.warning(f"Dashboard refresh for business {self.business_id} failed: {e}")
            return None

        message = {
            "type": "queue_update",
            "entries": [entry.to_supabase_dict() for entry in entries],
            "summary": summary,
        }
        await self.sink(message)
        return message
