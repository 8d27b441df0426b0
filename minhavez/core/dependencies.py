"""FastAPI dependencies: authentication and service wiring."""
from typing import Optional, Dict, Any
from fastapi import Depends, HTTPException, status, Header
import logging

from minhavez.config.database import get_supabase_service_client
from minhavez.core.supabase_auth import get_business_for_user, get_current_supabase_user
from minhavez.models.business import Business
from minhavez.services.analytics_service import AnalyticsService
from minhavez.services.queue.dispatcher import MutationResult, StatusTransitionDispatcher
from minhavez.services.queue.repository import QueueRepository
from minhavez.services.queue.service import QueueService
from minhavez.services.queue.wait_estimator import WaitEstimator, get_wait_estimator
from minhavez.services.reservations.repository import ReservationRepository
from minhavez.services.reservations.service import ReservationService
from minhavez.services.websocket.connection_manager import manager

logger = logging.getLogger(__name__)


def bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return authorization.split("Bearer ")[1]


async def get_current_user(
    authorization: Optional[str] = Header(None),
    supabase=Depends(get_supabase_service_client),
) -> Dict[str, Any]:
    """
    Get current authenticated staff user from the Supabase token.
    """
    return await get_current_supabase_user(bearer_token(authorization), supabase)


async def get_current_business(
    current_user: Dict[str, Any] = Depends(get_current_user),
    supabase=Depends(get_supabase_service_client),
) -> Business:
    """
    Get the business owned by the current user.
    """
    business = await get_business_for_user(current_user["sub"], supabase)
    logger.debug(f"Authenticated user {current_user.get('email')} with business {business.id}")
    return business


# --- Services ---

def get_queue_repository(supabase=Depends(get_supabase_service_client)) -> QueueRepository:
    return QueueRepository(supabase)


def get_queue_service(
    repository: QueueRepository = Depends(get_queue_repository),
    estimator: WaitEstimator = Depends(get_wait_estimator),
) -> QueueService:
    return QueueService(repository, estimator)


async def broadcast_mutation(business_id: str, result: MutationResult) -> None:
    """Push pending/confirmed/failed results to the business's dashboards."""
    await manager.broadcast_to_business(business_id, result.to_message())


def get_dispatcher(
    repository: QueueRepository = Depends(get_queue_repository),
) -> StatusTransitionDispatcher:
    return StatusTransitionDispatcher(repository, listener=broadcast_mutation)


def get_reservation_service(
    supabase=Depends(get_supabase_service_client),
    businesses: QueueRepository = Depends(get_queue_repository),
) -> ReservationService:
    return ReservationService(ReservationRepository(supabase), businesses)


def get_analytics_service(
    supabase=Depends(get_supabase_service_client),
    queue_repository: QueueRepository = Depends(get_queue_repository),
) -> AnalyticsService:
    return AnalyticsService(queue_repository, ReservationRepository(supabase))
