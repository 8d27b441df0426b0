"""Data access for queue entries, businesses and schedules."""
import logging
from typing import Any, Dict, List, Optional

from minhavez.models.business import Business
from minhavez.models.queue_entry import QueueEntry, QueueStatus
from minhavez.models.queue_schedule import QueueSchedule
from minhavez.utils.supabase_helpers import (
    run_query,
    safe_supabase_count,
    safe_supabase_insert,
    safe_supabase_select,
    safe_supabase_select_one,
    safe_supabase_update,
)

logger = logging.getLogger(__name__)

QUEUE_TABLE = "queue_entries"
BUSINESS_TABLE = "businesses"
SCHEDULE_TABLE = "queue_schedule"


class QueueRepository:
    """
    Thin wrapper over the Supabase query builder.

    The database is the single source of truth; nothing here caches rows.
    Every client failure surfaces as DatabaseError.
    """

    def __init__(self, supabase):
        self.supabase = supabase

    # --- Businesses ---

    async def get_business(self, business_id: str) -> Optional[Business]:
        row = safe_supabase_select_one(self.supabase, BUSINESS_TABLE, filters={"id": business_id})
        return Business.from_dict(row) if row else None

    async def set_queue_open(self, business_id: str, is_open: bool) -> Optional[Business]:
        row = safe_supabase_update(
            self.supabase, BUSINESS_TABLE, {"is_queue_open": is_open}, {"id": business_id}
        )
        return Business.from_dict(row) if row else None

    async def set_accepting_reservations(self, business_id: str, accepting: bool) -> Optional[Business]:
        row = safe_supabase_update(
            self.supabase, BUSINESS_TABLE, {"is_accepting_reservations": accepting}, {"id": business_id}
        )
        return Business.from_dict(row) if row else None

    # --- Entries ---

    async def get_entry(self, entry_id: str) -> Optional[QueueEntry]:
        row = safe_supabase_select_one(self.supabase, QUEUE_TABLE, filters={"id": entry_id})
        return QueueEntry.from_dict(row) if row else None

    async def count_waiting(self, business_id: str) -> int:
        return safe_supabase_count(
            self.supabase,
            QUEUE_TABLE,
            lambda q: q.eq("business_id", business_id).eq("status", QueueStatus.WAITING.value),
        )

    async def count_waiting_ahead(
        self, business_id: str, position: Optional[int], entry_id: Optional[str] = None
    ) -> int:
        """
        Waiting entries of the same business with a lower position.

        Without a position every other waiting entry counts as ahead.
        """
        if position is None:
            def build(q):
                q = q.eq("business_id", business_id).eq("status", QueueStatus.WAITING.value)
                return q.neq("id", entry_id) if entry_id else q
        else:
            def build(q):
                return (
                    q.eq("business_id", business_id)
                    .eq("status", QueueStatus.WAITING.value)
                    .lt("position", position)
                )
        return safe_supabase_count(self.supabase, QUEUE_TABLE, build)

    async def list_waiting(self, business_id: str) -> List[QueueEntry]:
        query = (
            self.supabase.table(QUEUE_TABLE)
            .select("*")
            .eq("business_id", business_id)
            .eq("status", QueueStatus.WAITING.value)
            .order("position")
        )
        response = run_query(query, QUEUE_TABLE)
        return [QueueEntry.from_dict(row) for row in response.data or []]

    async def list_active(self, business_id: str) -> List[QueueEntry]:
        """Waiting, called and attending entries, in queue order."""
        query = (
            self.supabase.table(QUEUE_TABLE)
            .select("*")
            .eq("business_id", business_id)
            .in_(
                "status",
                [QueueStatus.WAITING.value, QueueStatus.CALLED.value, QueueStatus.ATTENDING.value],
            )
            .order("position")
        )
        response = run_query(query, QUEUE_TABLE)
        return [QueueEntry.from_dict(row) for row in response.data or []]

    async def next_waiting(self, business_id: str) -> Optional[QueueEntry]:
        query = (
            self.supabase.table(QUEUE_TABLE)
            .select("*")
            .eq("business_id", business_id)
            .eq("status", QueueStatus.WAITING.value)
            .order("position")
            .limit(1)
        )
        response = run_query(query, QUEUE_TABLE)
        return QueueEntry.from_dict(response.data[0]) if response.data else None

    async def next_position(self, business_id: str) -> int:
        """
        Highest position ever handed out for the business plus one.

        Terminal rows are kept, so the maximum only grows and positions are
        never reused.
        """
        query = (
            self.supabase.table(QUEUE_TABLE)
            .select("position")
            .eq("business_id", business_id)
            .gt("position", 0)
            .order("position", desc=True)
            .limit(1)
        )
        response = run_query(query, QUEUE_TABLE)
        if response.data and response.data[0].get("position") is not None:
            return int(response.data[0]["position"]) + 1
        return 1

    async def insert_entry(self, data: Dict[str, Any]) -> QueueEntry:
        row = safe_supabase_insert(self.supabase, QUEUE_TABLE, data)
        return QueueEntry.from_dict(row)

    async def update_entry_if_status(
        self, entry_id: str, expected_status: QueueStatus, changes: Dict[str, Any]
    ) -> Optional[QueueEntry]:
        """
        Conditional write: only applies while the row still has `expected_status`.

        Returns None when no row matched, i.e. someone else moved it first.
        """
        row = safe_supabase_update(
            self.supabase,
            QUEUE_TABLE,
            changes,
            {"id": entry_id, "status": expected_status.value},
        )
        return QueueEntry.from_dict(row) if row else None

    async def list_entries(
        self, business_id: str, date_from: Optional[str] = None, date_to: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        query = self.supabase.table(QUEUE_TABLE).select("*").eq("business_id", business_id)
        if date_from:
            query = query.gte("joined_at", date_from)
        if date_to:
            query = query.lte("joined_at", date_to)
        response = run_query(query, QUEUE_TABLE)
        return response.data or []

    # --- Schedule ---

    async def list_schedule(self, business_id: str, active_only: bool = True) -> List[QueueSchedule]:
        filters = {"business_id": business_id}
        if active_only:
            filters["is_active"] = True
        rows = safe_supabase_select(self.supabase, SCHEDULE_TABLE, filters=filters)
        schedules = [QueueSchedule.from_dict(row) for row in rows]
        return sorted(schedules, key=lambda s: (s.day_of_week, s.start_time))

    async def replace_schedule(self, business_id: str, windows: List[Dict[str, Any]]) -> List[QueueSchedule]:
        """Insert the new windows first; old rows go only once the insert succeeded."""
        old_ids = [
            row["id"]
            for row in safe_supabase_select(self.supabase, SCHEDULE_TABLE, "id", {"business_id": business_id})
        ]
        saved: List[QueueSchedule] = []
        if windows:
            rows = [{**window, "business_id": business_id} for window in windows]
            response = run_query(self.supabase.table(SCHEDULE_TABLE).insert(rows), SCHEDULE_TABLE, "insert")
            saved = [QueueSchedule.from_dict(row) for row in response.data or []]
        if old_ids:
            run_query(
                self.supabase.table(SCHEDULE_TABLE).delete().in_("id", old_ids),
                SCHEDULE_TABLE,
                "delete",
            )
        return saved
