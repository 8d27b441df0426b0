"""Main API router."""
from fastapi import APIRouter

from minhavez.api.v1.endpoints import (
    analytics,
    public_queue,
    public_reservations,
    queue,
    reservations,
    websockets,
)

# Create main router
api_router = APIRouter()

# Public, no authentication
api_router.include_router(
    public_queue.router,
    prefix="/public/queue",
    tags=["Public Queue"]
)

api_router.include_router(
    public_reservations.router,
    prefix="/public/reservations",
    tags=["Public Reservations"]
)

# Staff dashboard, bearer token
api_router.include_router(
    queue.router,
    prefix="/queue",
    tags=["Queue"]
)

api_router.include_router(
    reservations.router,
    prefix="/reservations",
    tags=["Reservations"]
)

api_router.include_router(
    analytics.router,
    prefix="/analytics",
    tags=["Analytics"]
)

api_router.include_router(
    websockets.router,
    prefix="/ws",
    tags=["WebSockets"]
)
