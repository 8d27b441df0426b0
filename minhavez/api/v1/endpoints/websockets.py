"""WebSocket endpoints for the live customer wait view and the staff dashboard."""
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect

from minhavez.config.database import get_supabase_service_client
from minhavez.core.dependencies import get_queue_service
from minhavez.core.exceptions import MinhaVezError, NotFoundError
from minhavez.core.supabase_auth import get_business_for_user, verify_supabase_token
from minhavez.services.notifications.call_trigger import CallNotificationTrigger
from minhavez.services.notifications.capabilities import ClientCapabilities, capabilities_from_client
from minhavez.services.queue.recalculator import PositionRecalculator
from minhavez.services.queue.service import QueueService
from minhavez.services.realtime.listener import RealtimeChangeListener, get_realtime_listener
from minhavez.services.realtime.watchers import BusinessQueueWatcher, EntryWatcher
from minhavez.services.websocket.connection_manager import manager

logger = logging.getLogger(__name__)
router = APIRouter()


def _json_sender(websocket: WebSocket):
    async def send(message: Dict[str, Any]) -> None:
        await websocket.send_text(json.dumps(message, default=str))
    return send


@router.websocket("/queue/entries/{entry_id}")
async def entry_websocket(
    websocket: WebSocket,
    entry_id: str,
    service: QueueService = Depends(get_queue_service),
    listener: RealtimeChangeListener = Depends(get_realtime_listener),
):
    """
    Customer wait view.

    Pushes `position_update` messages whenever the queue changes and the
    call alert instructions (`notification`, `vibrate`, `play_sound`) when
    the entry is called. The browser reports what it supports with a
    `capabilities` message.
    """
    await manager.connect(websocket)

    try:
        entry, business, _ = await service.get_entry_status(entry_id)
    except NotFoundError:
        await websocket.close(code=4004, reason="Queue entry not found")
        return
    except MinhaVezError as e:
        logger.error(f"Could not load entry {entry_id} for live view: {e}")
        await websocket.close(code=1011, reason="Queue unavailable")
        return

    send = _json_sender(websocket)
    trigger = CallNotificationTrigger(ClientCapabilities.none(), business.name if business else None)
    recalculator = PositionRecalculator(service.repository, service.estimator, entry_id)
    watcher = EntryWatcher(listener, recalculator, trigger, send, entry.business_id)

    try:
        await watcher.start()
        while True:
            message = await websocket.receive_json()
            kind = message.get("type")
            if kind == "ping":
                await send({"type": "pong"})
            elif kind == "capabilities":
                trigger.capabilities = capabilities_from_client(send, message)
                await trigger.prepare()
            elif kind == "refresh":
                await watcher.refresh()

    except WebSocketDisconnect:
        logger.info(f"Customer WebSocket disconnected for entry {entry_id}")
    except Exception as e:
        logger.error(f"Customer WebSocket error for entry {entry_id}: {e}")
    finally:
        await watcher.stop()


@router.websocket("/queue/business/{business_id}")
async def business_websocket(
    websocket: WebSocket,
    business_id: str,
    token: Optional[str] = Query(None),
    supabase=Depends(get_supabase_service_client),
    service: QueueService = Depends(get_queue_service),
    listener: RealtimeChangeListener = Depends(get_realtime_listener),
):
    """
    Staff dashboard feed: `queue_update` on every change plus `mutation`
    results for actions taken by any staff member.

    Requires the Supabase access token in the "token" query parameter.
    """
    if not token:
        await websocket.close(code=4003, reason="Authentication token required")
        return

    payload = await verify_supabase_token(token, supabase)
    if not payload:
        await websocket.close(code=4003, reason="Invalid authentication token")
        return

    try:
        business = await get_business_for_user(payload["sub"], supabase)
    except (HTTPException, MinhaVezError):
        await websocket.close(code=4004, reason="Business not found")
        return

    if str(business.id) != str(business_id):
        await websocket.close(code=4003, reason="Unauthorized access to business")
        return

    await manager.connect(websocket)
    manager.add_to_business(business_id, websocket)
    send = _json_sender(websocket)
    watcher = BusinessQueueWatcher(listener, service, business_id, send)

    try:
        await watcher.start()
        while True:
            message = await websocket.receive_json()
            kind = message.get("type")
            if kind == "ping":
                await send({"type": "pong"})
            elif kind == "refresh":
                await watcher.refresh()

    except WebSocketDisconnect:
        logger.info(f"Dashboard WebSocket disconnected for business {business_id}")
    except Exception as e:
        logger.error(f"Dashboard WebSocket error for business {business_id}: {e}")
    finally:
        manager.disconnect(websocket)
        await watcher.stop()
