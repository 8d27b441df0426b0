"""Tests for Realtime subscriptions and the customer/dashboard watchers."""
import asyncio

import pytest

from minhavez.services.notifications.call_trigger import CallNotificationTrigger
from minhavez.services.queue.recalculator import PositionRecalculator
from minhavez.services.realtime.listener import (
    ChangeEvent,
    RealtimeChangeListener,
    business_filter,
    entry_filter,
)
from minhavez.services.realtime.watchers import BusinessQueueWatcher, EntryWatcher
from tests.conftest import BUSINESS_ID
from tests.fakes import FakeRealtimeClient, add_entry, recording_capabilities


class TestChangeEvent:
    def test_python_client_payload(self):
        change = ChangeEvent.from_payload(
            {"data": {"type": "UPDATE", "table": "queue_entries", "record": {"id": "e1"}, "old_record": {"id": "e1"}}}
        )
        assert change.event_type == "UPDATE"
        assert change.record == {"id": "e1"}

    def test_js_style_payload(self):
        change = ChangeEvent.from_payload({"eventType": "insert", "new": {"id": "e2"}, "old": {}})
        assert change.event_type == "INSERT"
        assert change.record == {"id": "e2"}

    def test_filters(self):
        assert entry_filter("e1") == "id=eq.e1"
        assert business_filter("b1") == "business_id=eq.b1"


class TestRealtimeChangeListener:
    @pytest.mark.asyncio
    async def test_subscribe_delivers_and_unsubscribes(self):
        client = FakeRealtimeClient()

        async def factory():
            return client

        received = []

        async def callback(change):
            received.append(change)

        listener = RealtimeChangeListener(client_factory=factory)
        subscription = await listener.subscribe(
            table="queue_entries", filter="business_id=eq.b1", callback=callback, channel_name="queue-b1"
        )

        channel = client.channels["queue-b1"]
        assert channel.subscribed
        handler = channel.handlers[0]
        assert (handler.event, handler.schema, handler.table, handler.filter) == (
            "*", "public", "queue_entries", "business_id=eq.b1"
        )

        handler.callback({"data": {"type": "UPDATE", "record": {"id": "e1", "status": "called"}}})
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert received[0].record["status"] == "called"

        await subscription.unsubscribe()
        await subscription.unsubscribe()
        assert client.removed == ["queue-b1"]

    @pytest.mark.asyncio
    async def test_callback_errors_are_contained(self):
        client = FakeRealtimeClient()

        async def factory():
            return client

        async def broken(change):
            raise RuntimeError("boom")

        listener = RealtimeChangeListener(client_factory=factory)
        await listener.subscribe(table="queue_entries", filter="id=eq.e1", callback=broken, channel_name="c")

        client.channels["c"].handlers[0].callback({"data": {"type": "DELETE"}})
        await asyncio.sleep(0)
        await asyncio.sleep(0)


@pytest.fixture
def sink():
    messages = []

    async def send(message):
        messages.append(message)

    send.messages = messages
    return send


def make_entry_watcher(repository, estimator, listener, sink, entry_id, capabilities):
    return EntryWatcher(
        listener,
        PositionRecalculator(repository, estimator, entry_id),
        CallNotificationTrigger(capabilities, "Barbearia do Zé"),
        sink,
        BUSINESS_ID,
    )


class TestEntryWatcher:
    @pytest.mark.asyncio
    async def test_start_sends_snapshot_and_subscribes(self, supabase, repository, estimator, listener, sink):
        add_entry(supabase, BUSINESS_ID, 1, "waiting")
        row = add_entry(supabase, BUSINESS_ID, 2, "waiting")
        capabilities, _ = recording_capabilities()
        watcher = make_entry_watcher(repository, estimator, listener, sink, row["id"], capabilities)

        await watcher.start()

        assert sink.messages[0]["rank"] == 2
        assert {s.filter for s in listener.active} == {entry_filter(row["id"]), business_filter(BUSINESS_ID)}

    @pytest.mark.asyncio
    async def test_rank_updates_when_someone_ahead_leaves(self, supabase, repository, estimator, listener, sink):
        ahead = add_entry(supabase, BUSINESS_ID, 1, "waiting")
        row = add_entry(supabase, BUSINESS_ID, 2, "waiting")
        capabilities, _ = recording_capabilities()
        watcher = make_entry_watcher(repository, estimator, listener, sink, row["id"], capabilities)
        await watcher.start()

        ahead["status"] = "completed"
        await listener.emit(business_filter(BUSINESS_ID), record=dict(ahead))

        assert sink.messages[-1]["rank"] == 1
        assert sink.messages[-1]["estimated_wait_minutes"] == 0

    @pytest.mark.asyncio
    async def test_call_fires_once(self, supabase, repository, estimator, listener, sink):
        row = add_entry(supabase, BUSINESS_ID, 1, "waiting")
        capabilities, calls = recording_capabilities()
        watcher = make_entry_watcher(repository, estimator, listener, sink, row["id"], capabilities)
        await watcher.start()

        row["status"] = "called"
        # both channels see the same update
        await listener.emit(entry_filter(row["id"]), record=dict(row))
        await listener.emit(business_filter(BUSINESS_ID), record=dict(row))

        assert [c[0] for c in calls].count("notify") == 1
        assert sink.messages[-1]["status"] == "called"
        assert sink.messages[-1]["rank"] is None

    @pytest.mark.asyncio
    async def test_entry_already_called_on_connect_does_not_fire(self, supabase, repository, estimator, listener, sink):
        row = add_entry(supabase, BUSINESS_ID, 1, "called")
        capabilities, calls = recording_capabilities()
        watcher = make_entry_watcher(repository, estimator, listener, sink, row["id"], capabilities)

        await watcher.start()
        assert calls == []

    @pytest.mark.asyncio
    async def test_failed_refresh_sends_nothing_new(self, supabase, repository, estimator, listener, sink):
        row = add_entry(supabase, BUSINESS_ID, 1, "waiting")
        capabilities, _ = recording_capabilities()
        watcher = make_entry_watcher(repository, estimator, listener, sink, row["id"], capabilities)
        await watcher.start()

        supabase.fail("queue_entries")
        await listener.emit(business_filter(BUSINESS_ID))
        assert len(sink.messages) == 1

    @pytest.mark.asyncio
    async def test_stop_unsubscribes(self, supabase, repository, estimator, listener, sink):
        row = add_entry(supabase, BUSINESS_ID, 1, "waiting")
        capabilities, _ = recording_capabilities()
        watcher = make_entry_watcher(repository, estimator, listener, sink, row["id"], capabilities)
        await watcher.start()

        await watcher.stop()
        assert listener.active == []


class TestBusinessQueueWatcher:
    @pytest.mark.asyncio
    async def test_refetches_list_and_summary_on_change(self, supabase, business, queue_service, listener, sink):
        add_entry(supabase, BUSINESS_ID, 1, "waiting")
        watcher = BusinessQueueWatcher(listener, queue_service, BUSINESS_ID, sink)
        await watcher.start()

        add_entry(supabase, BUSINESS_ID, 2, "waiting")
        await listener.emit(business_filter(BUSINESS_ID), event_type="INSERT")

        message = sink.messages[-1]
        assert message["type"] == "queue_update"
        assert [e["position"] for e in message["entries"]] == [1, 2]
        assert message["summary"]["queue_length"] == 2

        await watcher.stop()
        assert listener.active == []

    @pytest.mark.asyncio
    async def test_failed_refresh_is_skipped(self, supabase, business, queue_service, listener, sink):
        watcher = BusinessQueueWatcher(listener, queue_service, BUSINESS_ID, sink)
        await watcher.start()

        supabase.fail("queue_entries")
        await listener.emit(business_filter(BUSINESS_ID))
        assert len(sink.messages) == 1
