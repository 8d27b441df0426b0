"""Tests for the reservation lifecycle."""
from datetime import date, time

import pytest

from minhavez.core.exceptions import (
    CancellationReasonRequiredError,
    DatabaseError,
    InvalidTransitionError,
    NotFoundError,
    ReservationsClosedError,
    ValidationError,
)
from minhavez.models.reservation import ReservationSchedule
from minhavez.schemas.reservation import ReservationCreate
from minhavez.services.reservations.slots import generate_slots, is_slot_offered
from tests.conftest import BUSINESS_ID, OTHER_BUSINESS_ID


@pytest.fixture
def service(reservation_service):
    return reservation_service


@pytest.fixture
def saturday_evening(supabase, business):
    """Bookable Saturdays 18:00-22:00 plus an inactive Sunday window."""
    supabase.add(
        "reservation_schedule", business_id=BUSINESS_ID, day_of_week=6,
        start_time="18:00", end_time="22:00", is_active=True,
    )
    supabase.add(
        "reservation_schedule", business_id=BUSINESS_ID, day_of_week=0,
        start_time="12:00", end_time="15:00", is_active=False,
    )


def booking(**overrides):
    data = {
        "customer_name": "Carla",
        "party_size": 4,
        "reservation_date": date(2026, 10, 24),
        "reservation_time": "20:00",
    }
    data.update(overrides)
    return ReservationCreate(**data)


class TestReservationService:
    @pytest.mark.asyncio
    async def test_create_is_pending(self, supabase, business, service):
        reservation = await service.create(BUSINESS_ID, booking())

        assert reservation.status.value == "pending"
        stored = supabase.rows("reservations")[0]
        assert stored["reservation_date"] == "2026-10-24"
        assert stored["business_id"] == BUSINESS_ID

    @pytest.mark.asyncio
    async def test_create_rejected_when_not_accepting(self, supabase, business, service):
        supabase.rows("businesses")[0]["is_accepting_reservations"] = False
        with pytest.raises(ReservationsClosedError):
            await service.create(BUSINESS_ID, booking())

    @pytest.mark.asyncio
    async def test_lifecycle(self, business, service):
        reservation = await service.create(BUSINESS_ID, booking())

        confirmed = await service.transition(BUSINESS_ID, reservation.id, "confirm")
        assert confirmed.status.value == "confirmed"
        completed = await service.transition(BUSINESS_ID, reservation.id, "complete")
        assert completed.status.value == "completed"

        with pytest.raises(InvalidTransitionError):
            await service.transition(BUSINESS_ID, reservation.id, "cancel", reason="late")

    @pytest.mark.asyncio
    async def test_no_show_requires_confirmation(self, business, service):
        reservation = await service.create(BUSINESS_ID, booking())
        with pytest.raises(InvalidTransitionError):
            await service.transition(BUSINESS_ID, reservation.id, "no_show")

    @pytest.mark.asyncio
    async def test_cancel_requires_reason(self, business, service):
        reservation = await service.create(BUSINESS_ID, booking())
        with pytest.raises(CancellationReasonRequiredError):
            await service.transition(BUSINESS_ID, reservation.id, "cancel")

        cancelled = await service.transition(BUSINESS_ID, reservation.id, "cancel", reason="Mudança de planos")
        assert cancelled.cancellation_reason == "Mudança de planos"

    @pytest.mark.asyncio
    async def test_other_business_cannot_touch(self, business, other_business, service):
        reservation = await service.create(BUSINESS_ID, booking())
        with pytest.raises(NotFoundError):
            await service.transition(OTHER_BUSINESS_ID, reservation.id, "confirm")

    @pytest.mark.asyncio
    async def test_list_by_date(self, business, service):
        await service.create(BUSINESS_ID, booking(reservation_time="21:00"))
        await service.create(BUSINESS_ID, booking(reservation_time="19:00"))
        await service.create(BUSINESS_ID, booking(reservation_date=date(2026, 10, 25)))

        listed = await service.list(BUSINESS_ID, "2026-10-24")
        assert [r.reservation_time for r in listed] == ["19:00", "21:00"]

    @pytest.mark.asyncio
    async def test_toggle_accepting(self, business, service):
        updated = await service.toggle_accepting(BUSINESS_ID)
        assert updated.is_accepting_reservations is False


class TestSlots:
    def test_half_hour_starts_inside_window(self):
        windows = [ReservationSchedule(day_of_week=6, start_time="18:00", end_time="20:00")]
        assert generate_slots(windows, date(2026, 10, 24)) == [
            time(18, 0), time(18, 30), time(19, 0), time(19, 30),
        ]

    def test_overlapping_windows_not_duplicated(self):
        windows = [
            ReservationSchedule(day_of_week=6, start_time="19:00", end_time="20:00"),
            ReservationSchedule(day_of_week=6, start_time="11:00", end_time="12:00"),
            ReservationSchedule(day_of_week=6, start_time="19:30", end_time="20:30"),
        ]
        assert generate_slots(windows, date(2026, 10, 24)) == [
            time(11, 0), time(11, 30), time(19, 0), time(19, 30), time(20, 0),
        ]

    def test_other_days_and_inactive_windows_ignored(self):
        windows = [
            ReservationSchedule(day_of_week=5, start_time="18:00", end_time="20:00"),
            ReservationSchedule(day_of_week=6, start_time="18:00", end_time="20:00", is_active=False),
        ]
        assert generate_slots(windows, date(2026, 10, 24)) == []

    def test_offered_slot_matching(self):
        windows = [ReservationSchedule(day_of_week=6, start_time="18:00", end_time="19:00")]
        saturday = date(2026, 10, 24)
        assert is_slot_offered(windows, saturday, "18:30")
        assert is_slot_offered(windows, saturday, "18:30:00")
        assert not is_slot_offered(windows, saturday, "18:15")
        assert not is_slot_offered(windows, saturday, "19:00")
        assert not is_slot_offered(windows, saturday, "25:00")


class TestPublicBooking:
    @pytest.mark.asyncio
    async def test_available_slots(self, saturday_evening, service):
        slots = await service.available_slots(BUSINESS_ID, date(2026, 10, 24))
        assert slots == ["18:00", "18:30", "19:00", "19:30", "20:00", "20:30", "21:00", "21:30"]

        assert await service.available_slots(BUSINESS_ID, date(2026, 10, 25)) == []

    @pytest.mark.asyncio
    async def test_no_slots_in_the_past(self, saturday_evening, service):
        assert await service.available_slots(BUSINESS_ID, date(2026, 10, 17)) == []

    @pytest.mark.asyncio
    async def test_no_slots_when_not_accepting(self, supabase, saturday_evening, service):
        supabase.rows("businesses")[0]["is_accepting_reservations"] = False
        assert await service.available_slots(BUSINESS_ID, date(2026, 10, 24)) == []

    @pytest.mark.asyncio
    async def test_book_offered_slot(self, supabase, saturday_evening, service):
        reservation = await service.book(BUSINESS_ID, booking(reservation_time="21:30"))

        assert reservation.status.value == "pending"
        assert supabase.rows("reservations")[0]["reservation_time"] == "21:30"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("requested", ["20:15", "22:00", "17:30"])
    async def test_book_rejects_time_outside_slots(self, supabase, saturday_evening, service, requested):
        with pytest.raises(ValidationError):
            await service.book(BUSINESS_ID, booking(reservation_time=requested))
        assert supabase.rows("reservations") == []

    @pytest.mark.asyncio
    async def test_book_rejects_past_day(self, supabase, saturday_evening, service):
        with pytest.raises(ValidationError):
            await service.book(BUSINESS_ID, booking(reservation_date=date(2026, 10, 17)))

    @pytest.mark.asyncio
    async def test_book_without_schedule_rejected(self, business, service):
        with pytest.raises(ValidationError):
            await service.book(BUSINESS_ID, booking())

    @pytest.mark.asyncio
    async def test_book_rejected_when_not_accepting(self, supabase, saturday_evening, service):
        supabase.rows("businesses")[0]["is_accepting_reservations"] = False
        with pytest.raises(ReservationsClosedError):
            await service.book(BUSINESS_ID, booking())

    @pytest.mark.asyncio
    async def test_unknown_business(self, service):
        with pytest.raises(NotFoundError):
            await service.book("nope", booking())


class TestReservationSchedule:
    @pytest.mark.asyncio
    async def test_replace_schedule(self, supabase, saturday_evening, service):
        saved = await service.replace_schedule(
            BUSINESS_ID, [{"day_of_week": 5, "start_time": "19:00", "end_time": "23:00"}]
        )

        assert [(s.day_of_week, s.start_time) for s in saved] == [(5, time(19, 0))]
        assert len(supabase.rows("reservation_schedule")) == 1

    @pytest.mark.asyncio
    async def test_rejects_inverted_window(self, saturday_evening, service):
        with pytest.raises(ValidationError):
            await service.replace_schedule(
                BUSINESS_ID, [{"day_of_week": 5, "start_time": "23:00", "end_time": "19:00"}]
            )

    @pytest.mark.asyncio
    async def test_failed_replace_keeps_old_schedule(self, supabase, saturday_evening, service):
        supabase.fail("reservation_schedule", "insert")

        with pytest.raises(DatabaseError):
            await service.replace_schedule(
                BUSINESS_ID, [{"day_of_week": 5, "start_time": "19:00", "end_time": "23:00"}]
            )

        supabase.recover()
        assert len(await service.available_slots(BUSINESS_ID, date(2026, 10, 24))) == 8
