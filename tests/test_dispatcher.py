"""Tests for applying staff actions to queue entries."""
from datetime import datetime, timezone

import pytest

from minhavez.services.queue.dispatcher import MutationStatus, StatusTransitionDispatcher
from minhavez.services.queue.state_machine import QueueAction
from tests.conftest import BUSINESS_ID, OTHER_BUSINESS_ID
from tests.fakes import add_entry

NOW = datetime(2026, 10, 21, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def published():
    return []


@pytest.fixture
def dispatcher(repository, published):
    async def listener(business_id, result):
        published.append((business_id, result.status))

    return StatusTransitionDispatcher(repository, clock=lambda: NOW, listener=listener)


class TestDispatch:
    @pytest.mark.asyncio
    async def test_call_sets_status_and_called_at_only(self, supabase, dispatcher, published):
        row = add_entry(supabase, BUSINESS_ID, 4, "waiting")

        result = await dispatcher.dispatch(row["id"], QueueAction.CALL)

        assert result.ok
        assert result.entry.status.value == "called"
        stored = supabase.rows("queue_entries")[0]
        assert stored["called_at"] == NOW.isoformat()
        assert stored["position"] == 4
        assert published == [
            (BUSINESS_ID, MutationStatus.PENDING),
            (BUSINESS_ID, MutationStatus.CONFIRMED),
        ]

    @pytest.mark.asyncio
    async def test_out_of_order_rejected_without_write(self, supabase, dispatcher):
        row = add_entry(supabase, BUSINESS_ID, 1, "waiting")

        result = await dispatcher.dispatch(row["id"], QueueAction.COMPLETE)

        assert result.status == MutationStatus.FAILED
        assert result.error.code == "invalid_transition"
        assert ("queue_entries", "update") not in supabase.executed
        assert supabase.rows("queue_entries")[0]["status"] == "waiting"

    @pytest.mark.asyncio
    async def test_cancel_without_reason_rejected(self, supabase, dispatcher):
        row = add_entry(supabase, BUSINESS_ID, 1, "waiting")

        result = await dispatcher.dispatch(row["id"], QueueAction.CANCEL, reason="  ")

        assert result.error.code == "cancellation_reason_required"
        assert ("queue_entries", "update") not in supabase.executed

    @pytest.mark.asyncio
    async def test_cancel_stores_reason(self, supabase, dispatcher):
        row = add_entry(supabase, BUSINESS_ID, 1, "called")

        result = await dispatcher.dispatch(row["id"], QueueAction.CANCEL, reason="Tempo de espera muito longo")

        assert result.ok
        assert supabase.rows("queue_entries")[0]["cancellation_reason"] == "Tempo de espera muito longo"

    @pytest.mark.asyncio
    async def test_lost_race_reports_stale(self, supabase, repository, published):
        row = add_entry(supabase, BUSINESS_ID, 1, "waiting")

        async def sneaky_listener(business_id, result):
            # another staff member calls the entry between read and write
            if result.status == MutationStatus.PENDING:
                supabase.rows("queue_entries")[0]["status"] = "called"
            published.append(result.status)

        dispatcher = StatusTransitionDispatcher(repository, clock=lambda: NOW, listener=sneaky_listener)
        result = await dispatcher.dispatch(row["id"], QueueAction.CALL)

        assert result.status == MutationStatus.FAILED
        assert result.error.code == "stale_transition"
        assert published == [MutationStatus.PENDING, MutationStatus.FAILED]
        assert "called_at" not in supabase.rows("queue_entries")[0]

    @pytest.mark.asyncio
    async def test_entry_of_another_business_not_found(self, supabase, dispatcher):
        row = add_entry(supabase, OTHER_BUSINESS_ID, 1, "waiting")

        result = await dispatcher.dispatch(row["id"], QueueAction.CALL, business_id=BUSINESS_ID)

        assert result.error.code == "not_found"
        assert supabase.rows("queue_entries")[0]["status"] == "waiting"

    @pytest.mark.asyncio
    async def test_database_failure_reported(self, supabase, dispatcher):
        row = add_entry(supabase, BUSINESS_ID, 1, "waiting")
        supabase.fail("queue_entries", "update")

        result = await dispatcher.dispatch(row["id"], QueueAction.CALL)

        assert result.status == MutationStatus.FAILED
        assert result.error.code == "database_error"

    @pytest.mark.asyncio
    async def test_listener_failure_does_not_block(self, supabase, repository):
        row = add_entry(supabase, BUSINESS_ID, 1, "waiting")

        async def broken(business_id, result):
            raise RuntimeError("socket gone")

        dispatcher = StatusTransitionDispatcher(repository, listener=broken)
        result = await dispatcher.dispatch(row["id"], QueueAction.CALL)
        assert result.ok

    def test_mutation_message(self):
        from minhavez.core.exceptions import StaleTransitionError
        from minhavez.services.queue.dispatcher import MutationResult

        result = MutationResult(
            action="call", entry_id="e1", status=MutationStatus.FAILED, error=StaleTransitionError("late")
        )
        assert result.to_message() == {
            "type": "mutation",
            "action": "call",
            "entry_id": "e1",
            "status": "failed",
            "error": {"detail": "late", "code": "stale_transition"},
        }


class TestCallNext:
    @pytest.mark.asyncio
    async def test_calls_lowest_waiting_position(self, supabase, dispatcher):
        add_entry(supabase, BUSINESS_ID, 2, "called")
        add_entry(supabase, BUSINESS_ID, 6, "waiting")
        first = add_entry(supabase, BUSINESS_ID, 4, "waiting")

        result = await dispatcher.call_next(BUSINESS_ID)

        assert result.ok
        assert result.entry_id == first["id"]

    @pytest.mark.asyncio
    async def test_empty_queue(self, dispatcher):
        result = await dispatcher.call_next(BUSINESS_ID)
        assert result.status == MutationStatus.FAILED
        assert result.error.code == "queue_empty"
