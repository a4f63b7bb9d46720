"""WebSocket connection manager for broadcasting proximity alerts."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from fastapi import WebSocket

from defrost.core.notifier import NotificationRequest
from defrost.websocket.schemas import AlertMessage

logger = logging.getLogger(__name__)


@dataclass
class ClientSubscription:
    """Tracks a client's subscription preferences."""

    websocket: WebSocket
    categories: set[str] = field(default_factory=set)
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def matches(self, request: NotificationRequest) -> bool:
        """Check if an alert matches this subscription's category filter."""
        if self.categories and request.payload.get("category") not in self.categories:
            return False
        return True


class ConnectionManager:
    """
    Manages WebSocket connections of the device's UI clients and pushes alerts.

    Connections are guarded by an asyncio lock; broadcasts run on the event loop.
    """

    def __init__(self):
        self._connections: dict[WebSocket, ClientSubscription] = {}
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        """Number of active connections."""
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self._connections[websocket] = ClientSubscription(websocket=websocket)
        logger.info(f"WebSocket connected. Total connections: {self.connection_count}")

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a disconnected WebSocket."""
        async with self._lock:
            if websocket in self._connections:
                del self._connections[websocket]
        logger.info(f"WebSocket disconnected. Total connections: {self.connection_count}")

    async def update_subscription(
        self,
        websocket: WebSocket,
        categories: list[str] | None = None,
    ) -> None:
        """Update a client's category filter."""
        async with self._lock:
            if websocket in self._connections and categories is not None:
                self._connections[websocket].categories = set(categories)
                logger.debug(f"Updated subscription: categories={categories}")

    async def broadcast(self, request: NotificationRequest) -> int:
        """
        Send an alert to every subscriber whose filter matches.

        Returns the number of clients the alert was sent to.
        """
        async with self._lock:
            if not self._connections:
                return 0

            message = AlertMessage(data=request, timestamp=datetime.now(UTC))

            tasks = [
                self._send_safe(websocket, message)
                for websocket, subscription in list(self._connections.items())
                if subscription.matches(request)
            ]

            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
                logger.info(f"Broadcast alert {request.identifier} to {len(tasks)} subscribers")

            return len(tasks)

    async def _send_safe(self, websocket: WebSocket, message: AlertMessage) -> None:
        """Send message to websocket, handling errors gracefully."""
        try:
            await websocket.send_json(message.model_dump(mode="json"))
        except Exception as e:
            logger.warning(f"Failed to send to websocket: {e}")
            # Schedule disconnect (don't do it here to avoid deadlock)
            asyncio.create_task(self.disconnect(websocket))
