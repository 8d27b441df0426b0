"""Data access for reservations."""
from typing import Any, Dict, List, Optional

from minhavez.models.reservation import Reservation, ReservationSchedule, ReservationStatus
from minhavez.utils.supabase_helpers import (
    run_query,
    safe_supabase_insert,
    safe_supabase_select,
    safe_supabase_select_one,
    safe_supabase_update,
)

RESERVATION_TABLE = "reservations"
SCHEDULE_TABLE = "reservation_schedule"


class ReservationRepository:
    def __init__(self, supabase):
        self.supabase = supabase

    async def get(self, reservation_id: str) -> Optional[Reservation]:
        row = safe_supabase_select_one(self.supabase, RESERVATION_TABLE, filters={"id": reservation_id})
        return Reservation.from_dict(row) if row else None

    async def list_for_business(
        self, business_id: str, reservation_date: Optional[str] = None, status: Optional[str] = None
    ) -> List[Reservation]:
        query = self.supabase.table(RESERVATION_TABLE).select("*").eq("business_id", business_id)
        if reservation_date:
            query = query.eq("reservation_date", reservation_date)
        if status:
            query = query.eq("status", status)
        query = query.order("reservation_date").order("reservation_time")
        response = run_query(query, RESERVATION_TABLE)
        return [Reservation.from_dict(row) for row in response.data or []]

    async def list_between(
        self, business_id: str, date_from: Optional[str] = None, date_to: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        query = self.supabase.table(RESERVATION_TABLE).select("*").eq("business_id", business_id)
        if date_from:
            query = query.gte("reservation_date", date_from)
        if date_to:
            query = query.lte("reservation_date", date_to)
        response = run_query(query, RESERVATION_TABLE)
        return response.data or []

    async def insert(self, data: Dict[str, Any]) -> Reservation:
        return Reservation.from_dict(safe_supabase_insert(self.supabase, RESERVATION_TABLE, data))

    async def list_schedule(self, business_id: str) -> List[ReservationSchedule]:
        rows = safe_supabase_select(
            self.supabase, SCHEDULE_TABLE, filters={"business_id": business_id, "is_active": True}
        )
        schedules = [ReservationSchedule.from_dict(row) for row in rows]
        return sorted(schedules, key=lambda s: (s.day_of_week, s.start_time))

    async def replace_schedule(self, business_id: str, windows: List[Dict[str, Any]]) -> List[ReservationSchedule]:
        """Same insert-then-delete order as the queue schedule."""
        old_ids = [
            row["id"]
            for row in safe_supabase_select(self.supabase, SCHEDULE_TABLE, "id", {"business_id": business_id})
        ]
        saved: List[ReservationSchedule] = []
        if windows:
            rows = [{**window, "business_id": business_id} for window in windows]
            response = run_query(self.supabase.table(SCHEDULE_TABLE).insert(rows), SCHEDULE_TABLE, "insert")
            saved = [ReservationSchedule.from_dict(row) for row in response.data or []]
        if old_ids:
            run_query(
                self.supabase.table(SCHEDULE_TABLE).delete().in_("id", old_ids),
                SCHEDULE_TABLE,
                "delete",
            )
        return saved

    async def update_if_status(
        self, reservation_id: str, expected_status: ReservationStatus, changes: Dict[str, Any]
    ) -> Optional[Reservation]:
        """Conditional write; None when the row no longer has `expected_status`."""
        row = safe_supabase_update(
            self.supabase,
            RESERVATION_TABLE,
            changes,
            {"id": reservation_id, "status": expected_status.value},
        )
        return Reservation.from_dict(row) if row else None
