"""WebSocket router for real-time proximity alerts."""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from defrost.core.geo import Position
from defrost.websocket.schemas import (
    ErrorMessage,
    LocationMessage,
    PongMessage,
    SubscribeMessage,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/alerts")
async def websocket_alerts(websocket: WebSocket):
    """
    WebSocket endpoint for proximity alerts.

    Protocol:
    - Client connects
    - Client optionally sends subscribe message with a category filter
    - Client sends location fixes as the device moves
    - Server pushes an alert for each new report within the alert radius
    - Server sends pong in response to ping for keep-alive

    Message formats:
    Client -> Server:
        {"type": "subscribe", "categories": ["CHECKPOINT", "RAID"]}
        {"type": "location", "latitude": 40.7128, "longitude": -74.0060}
        {"type": "ping"}

    Server -> Client:
        {"type": "alert", "data": {"identifier": "...", "title": "...", "body": "...", "payload": {...}}, "timestamp": "..."}
        {"type": "pong"}
        {"type": "error", "message": "..."}
    """
    services = websocket.app.state.services
    manager = services.connection_manager
    await manager.connect(websocket)

    try:
        while True:
            raw_message = await websocket.receive_text()

            try:
                data = json.loads(raw_message)
                msg_type = data.get("type")

                if msg_type == "subscribe":
                    msg = SubscribeMessage.model_validate(data)
                    categories = (
                        [c.value for c in msg.categories]
                        if msg.categories is not None
                        else None
                    )
                    await manager.update_subscription(websocket, categories=categories)
                    logger.info(f"Subscription updated: categories={categories}")

                elif msg_type == "location":
                    msg = LocationMessage.model_validate(data)
                    await services.location_source.submit_fix(
                        Position(latitude=msg.latitude, longitude=msg.longitude)
                    )

                elif msg_type == "ping":
                    await websocket.send_json(PongMessage().model_dump())

                else:
                    error = ErrorMessage(message=f"Unknown message type: {msg_type}")
                    await websocket.send_json(error.model_dump())

            except json.JSONDecodeError:
                error = ErrorMessage(message="Invalid JSON")
                await websocket.send_json(error.model_dump())
            except Exception as e:
                logger.exception(f"Error processing message: {e}")
                error = ErrorMessage(message=str(e))
                await websocket.send_json(error.model_dump())

    except WebSocketDisconnect:
        await manager.disconnect(websocket)
    except Exception as e:
        logger.exception(f"WebSocket error: {e}")
        await manager.disconnect(websocket)
