"""Subscribe to row-level change notifications on a Supabase table."""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from minhavez.config.database import get_async_supabase_client

logger = logging.getLogger(__name__)


@dataclass
class ChangeEvent:
    """A normalised postgres_changes notification."""
    event_type: str  # INSERT | UPDATE | DELETE
    table: Optional[str] = None
    record: Dict[str, Any] = field(default_factory=dict)
    old_record: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ChangeEvent":
        """Accepts both the realtime-py shape ({"data": {...}}) and the JS-client shape."""
        data = payload.get("data", payload) or {}
        return cls(
            event_type=str(data.get("type") or data.get("eventType") or "").upper(),
            table=data.get("table"),
            record=data.get("record") or data.get("new") or {},
            old_record=data.get("old_record") or data.get("old") or {},
        )


ChangeCallback = Callable[[ChangeEvent], Awaitable[None]]


def entry_filter(entry_id) -> str:
    return f"id=eq.{entry_id}"


def business_filter(business_id) -> str:
    return f"business_id=eq.{business_id}"


class Subscription:
    """Handle returned by subscribe(); unsubscribe() removes the channel."""

    def __init__(self, client, channel, name: str):
        self._client = client
        self._channel = channel
        self.name = name
        self.active = True

    async def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        try:
            await self._client.remove_channel(self._channel)
            logger.debug(f"Realtime channel {self.name} removed")
        except Exception as e:
            logger.warning(f"Failed to remove realtime channel {self.name}: {e}")


class RealtimeChangeListener:
    """
    Opens one Realtime channel per subscription.

    Callbacks get no diffing: they are told that something matching the
    filter changed and usually re-fetch. Callback errors are logged and do
    not tear down the channel.
    """

    def __init__(self, client_factory: Callable[[], Awaitable[Any]] = get_async_supabase_client):
        self._client_factory = client_factory
        self._tasks: Set[asyncio.Task] = set()

    async def subscribe(
        self,
        *,
        table: str,
        filter: str,
        callback: ChangeCallback,
        channel_name: str,
        schema: str = "public",
        event: str = "*",
    ) -> Subscription:
        client = await self._client_factory()
        channel = client.channel(channel_name)

        def on_change(payload):
            change = ChangeEvent.from_payload(payload)
            task = asyncio.ensure_future(self._run(channel_name, callback, change))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        channel.on_postgres_changes(
            event, schema=schema, table=table, filter=filter, callback=on_change
        )
        await channel.subscribe()
        logger.info(f"Subscribed realtime channel {channel_name} ({table} where {filter})")
        return Subscription(client, channel, channel_name)

    @staticmethod
    async def _run(channel_name: str, callback: ChangeCallback, change: ChangeEvent) -> None:
        try:
            await callback(change)
        except Exception as e:
            logger.error(f"Realtime callback on {channel_name} failed: {e}", exc_info=True)


_listener: Optional[RealtimeChangeListener] = None


def get_realtime_listener() -> RealtimeChangeListener:
    global _listener
    if _listener is None:
        _listener = RealtimeChangeListener()
    return _listener
