from . import (
    analytics,
    public_queue,
    public_reservations,
    queue,
    reservations,
    websockets,
)
