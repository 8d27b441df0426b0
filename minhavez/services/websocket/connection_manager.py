"""
Tracks staff dashboard WebSocket connections per business.
"""
import json
import logging
from collections import defaultdict
from typing import Any, DefaultDict, Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Manages active WebSocket connections grouped by business.
    """

    def __init__(self):
        self.business_connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)

    async def connect(self, websocket: WebSocket):
        """Accept WebSocket connection."""
        await websocket.accept()

    def add_to_business(self, business_id: str, websocket: WebSocket):
        self.business_connections[str(business_id)].add(websocket)
        logger.info(
            f"Dashboard connected to business {business_id}. "
            f"Total: {len(self.business_connections[str(business_id)])}"
        )

    def disconnect(self, websocket: WebSocket):
        """Remove WebSocket connection from every business group."""
        for key in list(self.business_connections):
            self.business_connections[key].discard(websocket)
            if not self.business_connections[key]:
                del self.business_connections[key]

    def business_connection_count(self, business_id: str) -> int:
        return len(self.business_connections.get(str(business_id), ()))

    async def broadcast_to_business(self, business_id: str, message: Dict[str, Any]):
        """Broadcast a message to every dashboard watching the business."""
        await self._send_all(set(self.business_connections.get(str(business_id), ())), message)

    async def _send_all(self, connections: Set[WebSocket], message: Dict[str, Any]):
        if not connections:
            return

        message_str = json.dumps(message, default=str)
        for connection in connections:
            try:
                await connection.send_text(message_str)
            except Exception as e:
                logger.error(f"Error broadcasting message: {e}")
                self.disconnect(connection)


# Global instance of the connection manager
manager = ConnectionManager()
