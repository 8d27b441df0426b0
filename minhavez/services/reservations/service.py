"""Reservation lifecycle: create, book, list, transition, schedule, toggle acceptance."""
import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional

from minhavez.core.exceptions import (
    NotFoundError,
    ReservationsClosedError,
    StaleTransitionError,
    ValidationError,
)
from minhavez.models.business import Business
from minhavez.models.reservation import Reservation, ReservationSchedule, ReservationStatus
from minhavez.schemas.reservation import ReservationCreate
from minhavez.services.queue.availability import business_timezone, validate_windows
from minhavez.services.queue.repository import QueueRepository
from minhavez.services.queue.state_machine import TransitionRule, build_transition_changes
from minhavez.services.reservations.repository import ReservationRepository
from minhavez.services.reservations.slots import generate_slots, is_slot_offered

logger = logging.getLogger(__name__)


class ReservationAction(str, Enum):
    CONFIRM = "confirm"
    COMPLETE = "complete"
    CANCEL = "cancel"
    NO_SHOW = "no_show"


RESERVATION_TRANSITIONS: Dict[ReservationAction, TransitionRule] = {
    ReservationAction.CONFIRM: TransitionRule(
        ReservationAction.CONFIRM.value,
        frozenset({ReservationStatus.PENDING.value}),
        ReservationStatus.CONFIRMED.value,
    ),
    ReservationAction.COMPLETE: TransitionRule(
        ReservationAction.COMPLETE.value,
        frozenset({ReservationStatus.CONFIRMED.value}),
        ReservationStatus.COMPLETED.value,
    ),
    ReservationAction.CANCEL: TransitionRule(
        ReservationAction.CANCEL.value,
        frozenset({ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value}),
        ReservationStatus.CANCELLED.value,
        requires_reason=True,
    ),
    ReservationAction.NO_SHOW: TransitionRule(
        ReservationAction.NO_SHOW.value,
        frozenset({ReservationStatus.CONFIRMED.value}),
        ReservationStatus.NO_SHOW.value,
    ),
}


class ReservationService:
    def __init__(
        self,
        repository: ReservationRepository,
        businesses: QueueRepository,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.repository = repository
        self.businesses = businesses
        self.clock = clock

    async def _business(self, business_id: str) -> Business:
        business = await self.businesses.get_business(business_id)
        if business is None:
            raise NotFoundError("Business not found")
        return business

    async def create(self, business_id: str, data: ReservationCreate) -> Reservation:
        business = await self._business(business_id)
        if not business.is_accepting_reservations:
            raise ReservationsClosedError("This business is not accepting reservations")

        payload = data.model_dump(mode="json", exclude_none=True)
        payload.update({"business_id": business_id, "status": ReservationStatus.PENDING.value})
        reservation = await self.repository.insert(payload)
        logger.info(f"Reservation {reservation.id} created for business {business_id}")
        return reservation

    async def book(self, business_id: str, data: ReservationCreate) -> Reservation:
        """Customer booking from the public link: the day must be today or later and the time an offered slot."""
        business = await self._business(business_id)
        if not business.is_accepting_reservations:
            raise ReservationsClosedError("This business is not accepting reservations")

        if data.reservation_date < self.local_today(business):
            raise ValidationError("Reservation date is in the past")
        schedules = await self.repository.list_schedule(business_id)
        if not is_slot_offered(schedules, data.reservation_date, data.reservation_time):
            raise ValidationError("Requested time is not an available slot")
        return await self.create(business_id, data)

    async def available_slots(self, business_id: str, day: date) -> List[str]:
        business = await self._business(business_id)
        if not business.is_accepting_reservations or day < self.local_today(business):
            return []
        schedules = await self.repository.list_schedule(business_id)
        return [slot.strftime("%H:%M") for slot in generate_slots(schedules, day)]

    def local_today(self, business: Business) -> date:
        now = self.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(business_timezone(business)).date()

    async def get_schedule(self, business_id: str) -> List[ReservationSchedule]:
        return await self.repository.list_schedule(business_id)

    async def replace_schedule(self, business_id: str, windows: List[dict]) -> List[ReservationSchedule]:
        cleaned = validate_windows(windows)
        return await self.repository.replace_schedule(business_id, cleaned)

    async def list(
        self, business_id: str, reservation_date: Optional[str] = None, status: Optional[str] = None
    ) -> List[Reservation]:
        return await self.repository.list_for_business(business_id, reservation_date, status)

    async def transition(
        self, business_id: str, reservation_id: str, action, reason: Optional[str] = None
    ) -> Reservation:
        """Raises on illegal or lost transitions; the API maps errors to 4xx."""
        action = ReservationAction(action)
        reservation = await self.repository.get(reservation_id)
        if reservation is None or str(reservation.business_id) != str(business_id):
            raise NotFoundError("Reservation not found")

        changes = build_transition_changes(
            RESERVATION_TRANSITIONS, reservation.status, action, now=self.clock(), reason=reason
        )
        updated = await self.repository.update_if_status(reservation_id, reservation.status, changes)
        if updated is None:
            raise StaleTransitionError("Reservation changed before this action was applied")
        logger.info(
            f"Reservation {reservation_id} {reservation.status.value} -> {updated.status.value}"
        )
        return updated

    async def toggle_accepting(self, business_id: str) -> Business:
        business = await self._business(business_id)
        updated = await self.businesses.set_accepting_reservations(
            business_id, not business.is_accepting_reservations
        )
        if updated is None:
            raise NotFoundError("Business not found")
        return updated
