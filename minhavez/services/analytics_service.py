"""Analytics Service for the queue and reservation dashboard."""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from minhavez.models.base import parse_timestamp
from minhavez.models.business_goal import BusinessGoal, GoalType, PeriodType
from minhavez.models.queue_entry import QueueStatus
from minhavez.models.reservation import ReservationStatus
from minhavez.schemas.analytics import AnalyticsOverview, GoalProgress, QueueMetrics, ReservationMetrics
from minhavez.services.queue.repository import QUEUE_TABLE, QueueRepository
from minhavez.services.reservations.repository import RESERVATION_TABLE, ReservationRepository
from minhavez.utils.supabase_helpers import run_query, safe_supabase_count

logger = logging.getLogger(__name__)

GOAL_TABLE = "business_goals"

PERIODS = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "15d": timedelta(days=15),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}

SERVED_STATUSES = [QueueStatus.COMPLETED.value, QueueStatus.ATTENDING.value]


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total else 0.0


def queue_metrics(entries: List[Dict[str, Any]]) -> QueueMetrics:
    """Counts by status plus the mean stored wait estimate."""
    by_status: Dict[str, int] = {}
    for entry in entries:
        by_status[entry.get("status")] = by_status.get(entry.get("status"), 0) + 1

    waits = [e["estimated_wait_time"] for e in entries if e.get("estimated_wait_time") is not None]
    total = len(entries)
    completed = by_status.get(QueueStatus.COMPLETED.value, 0)
    return QueueMetrics(
        total=total,
        completed=completed,
        cancelled=by_status.get(QueueStatus.CANCELLED.value, 0),
        no_show=by_status.get(QueueStatus.NO_SHOW.value, 0),
        waiting=by_status.get(QueueStatus.WAITING.value, 0),
        avg_wait_time=round(sum(waits) / len(waits)) if waits else 0,
        completion_rate=_rate(completed, total),
    )


def reservation_metrics(reservations: List[Dict[str, Any]]) -> ReservationMetrics:
    total = len(reservations)
    counts = {status: 0 for status in ReservationStatus}
    for reservation in reservations:
        try:
            counts[ReservationStatus(reservation.get("status"))] += 1
        except ValueError:
            logger.debug(f"Ignoring reservation with unknown status {reservation.get('status')}")
    return ReservationMetrics(
        total=total,
        confirmed=counts[ReservationStatus.CONFIRMED],
        pending=counts[ReservationStatus.PENDING],
        cancelled=counts[ReservationStatus.CANCELLED],
        no_show=counts[ReservationStatus.NO_SHOW],
        confirmation_rate=_rate(counts[ReservationStatus.CONFIRMED], total),
    )


def average_service_minutes(entries: List[Dict[str, Any]]) -> int:
    """Mean minutes from joined_at to completed_at (or attended_at), rounded."""
    durations = []
    for entry in entries:
        ended = entry.get("completed_at") or entry.get("attended_at")
        joined = entry.get("joined_at")
        if not ended or not joined:
            continue
        delta = parse_timestamp(ended) - parse_timestamp(joined)
        durations.append(delta.total_seconds() / 60)
    return round(sum(durations) / len(durations)) if durations else 0


def goal_progress(goal: BusinessGoal, current_value: float) -> GoalProgress:
    target = float(goal.target_value or 0)
    percent = min(100.0, current_value / target * 100) if target > 0 else 0.0
    return GoalProgress(
        goal_id=str(goal.id),
        goal_type=goal.goal_type.value,
        period_type=goal.period_type.value,
        target_value=target,
        current_value=current_value,
        progress_percent=round(percent, 1),
        start_date=goal.start_date,
        end_date=goal.end_date,
    )


class AnalyticsService:
    """Service for dashboard metrics over queue_entries and reservations."""

    def __init__(
        self,
        queue_repository: QueueRepository,
        reservation_repository: ReservationRepository,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.queue_repository = queue_repository
        self.reservation_repository = reservation_repository
        self.supabase = queue_repository.supabase
        self.clock = clock

    def period_range(self, period: str = "7d") -> Tuple[datetime, datetime]:
        end = self.clock()
        return end - PERIODS.get(period, PERIODS["7d"]), end

    async def get_overview(self, business_id: str, period: str = "7d") -> AnalyticsOverview:
        start, end = self.period_range(period)
        entries = await self.queue_repository.list_entries(business_id, start.isoformat(), end.isoformat())
        reservations = await self.reservation_repository.list_between(
            business_id, start.date().isoformat(), end.date().isoformat()
        )
        return AnalyticsOverview(
            queue=queue_metrics(entries),
            reservations=reservation_metrics(reservations),
        )

    async def get_active_goal(
        self, business_id: str, goal_type: GoalType, period_type: PeriodType
    ) -> Optional[BusinessGoal]:
        """Most recently created active goal whose date range covers today."""
        today = self.clock().date().isoformat()
        query = (
            self.supabase.table(GOAL_TABLE)
            .select("*")
            .eq("business_id", business_id)
            .eq("goal_type", GoalType(goal_type).value)
            .eq("period_type", PeriodType(period_type).value)
            .eq("is_active", True)
            .lte("start_date", today)
            .gte("end_date", today)
            .order("created_at", desc=True)
        )
        response = run_query(query, GOAL_TABLE)
        return BusinessGoal.from_dict(response.data[0]) if response.data else None

    async def get_goal_progress(
        self, business_id: str, goal_type: GoalType, period_type: PeriodType = PeriodType.DAILY
    ) -> Optional[GoalProgress]:
        goal = await self.get_active_goal(business_id, goal_type, period_type)
        if goal is None:
            return None
        current = await self.current_value(business_id, goal)
        return goal_progress(goal, current)

    async def current_value(self, business_id: str, goal: BusinessGoal) -> float:
        start_day = _as_date(goal.start_date)
        end_day = _as_date(goal.end_date)
        joined_from = f"{start_day.isoformat()}T00:00:00"
        joined_to = f"{end_day.isoformat()}T23:59:59.999999"

        def served(q):
            return (
                q.eq("business_id", business_id)
                .in_("status", SERVED_STATUSES)
                .gte("joined_at", joined_from)
                .lte("joined_at", joined_to)
            )

        goal_type = goal.goal_type
        if goal_type in (GoalType.ATTENDANCE, GoalType.QUEUE_SERVED):
            return safe_supabase_count(self.supabase, QUEUE_TABLE, served)

        if goal_type == GoalType.AVG_TIME:
            query = served(
                self.supabase.table(QUEUE_TABLE).select("joined_at, attended_at, completed_at")
            )
            response = run_query(query, QUEUE_TABLE)
            return average_service_minutes(response.data or [])

        if goal_type == GoalType.RESERVATIONS_SERVED:
            return safe_supabase_count(
                self.supabase,
                RESERVATION_TABLE,
                lambda q: q.eq("business_id", business_id)
                .eq("status", ReservationStatus.COMPLETED.value)
                .gte("reservation_date", start_day.isoformat())
                .lte("reservation_date", end_day.isoformat()),
            )

        if goal_type == GoalType.RESERVATIONS_PENDING:
            today = self.clock().date().isoformat()
            return safe_supabase_count(
                self.supabase,
                RESERVATION_TABLE,
                lambda q: q.eq("business_id", business_id)
                .in_("status", [ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value])
                .gte("reservation_date", today)
                .lte("reservation_date", end_day.isoformat()),
            )

        # queue_pending is a live count, not bound to the goal period
        return await self.queue_repository.count_waiting(business_id)


def _as_date(value) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])
