"""WebSocket module for real-time proximity alerts."""

from defrost.websocket.manager import ConnectionManager
from defrost.websocket.router import router as websocket_router

__all__ = ["ConnectionManager", "websocket_router"]
