"""Pytest configuration and fixtures."""

import os

# Keep test runs off the filesystem and away from any real Redis.
os.environ["LOG_TO_FILE"] = "false"
os.environ["REDIS_URL"] = ""

from datetime import datetime, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from minhavez.config.database import get_supabase_service_client
from minhavez.core.dependencies import get_queue_service, get_reservation_service
from minhavez.main import app
from minhavez.services.queue.repository import QueueRepository
from minhavez.services.queue.service import QueueService
from minhavez.services.queue.wait_estimator import WaitEstimator
from minhavez.services.reservations.repository import ReservationRepository
from minhavez.services.reservations.service import ReservationService
from minhavez.services.realtime.listener import get_realtime_listener
from tests.fakes import FakeListener, FakeSupabase

BUSINESS_ID = "biz-1"
OTHER_BUSINESS_ID = "biz-2"
STAFF_TOKEN = "staff-token"

# Wednesday 12:00 in São Paulo (UTC-3)
WEDNESDAY_NOON_UTC = datetime(2026, 10, 21, 15, 0, tzinfo=timezone.utc)


def fixed_clock():
    return WEDNESDAY_NOON_UTC


@pytest.fixture
def supabase() -> FakeSupabase:
    """Empty fake database."""
    return FakeSupabase()


@pytest.fixture
def business(supabase: FakeSupabase) -> dict:
    """An open business with a Wednesday 09:00-18:00 window and a staff login."""
    row = supabase.add(
        "businesses",
        id=BUSINESS_ID,
        user_id="user-1",
        name="Barbearia do Zé",
        business_type="barbearia",
        address="Rua das Flores, 10",
        timezone="America/Sao_Paulo",
        is_queue_open=True,
        is_accepting_reservations=True,
    )
    supabase.add(
        "queue_schedule",
        business_id=BUSINESS_ID,
        day_of_week=3,
        start_time="09:00",
        end_time="18:00",
        is_active=True,
    )
    supabase.auth.add_user(STAFF_TOKEN, "user-1")
    return row


@pytest.fixture
def other_business(supabase: FakeSupabase) -> dict:
    supabase.auth.add_user("other-token", "user-2")
    return supabase.add("businesses", id=OTHER_BUSINESS_ID, user_id="user-2", name="Bar do Beto")


@pytest.fixture
def repository(supabase: FakeSupabase) -> QueueRepository:
    return QueueRepository(supabase)


@pytest.fixture
def estimator() -> WaitEstimator:
    return WaitEstimator(minutes_per_customer=15)


@pytest.fixture
def queue_service(repository, estimator) -> QueueService:
    return QueueService(repository, estimator, clock=fixed_clock)


@pytest.fixture
def reservation_service(supabase) -> ReservationService:
    return ReservationService(ReservationRepository(supabase), QueueRepository(supabase), clock=fixed_clock)


@pytest.fixture
def listener() -> FakeListener:
    return FakeListener()


@pytest.fixture
def client(supabase, queue_service, reservation_service, listener) -> Generator[TestClient, None, None]:
    """Test client wired to the fake database and a fixed Wednesday-noon clock."""
    app.dependency_overrides[get_supabase_service_client] = lambda: supabase
    app.dependency_overrides[get_queue_service] = lambda: queue_service
    app.dependency_overrides[get_reservation_service] = lambda: reservation_service
    app.dependency_overrides[get_realtime_listener] = lambda: listener
    # Don't raise server exceptions so we can test error status codes
    test_client = TestClient(app, raise_server_exceptions=False)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {STAFF_TOKEN}"}
