"""WebSocket message schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from defrost.core.notifier import NotificationRequest
from defrost.schemas.report import ReportCategory


class SubscribeMessage(BaseModel):
    """Client subscription message to filter alerts by category."""

    type: Literal["subscribe"] = "subscribe"
    categories: list[ReportCategory] | None = None


class LocationMessage(BaseModel):
    """Client location fix."""

    type: Literal["location"] = "location"
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class AlertMessage(BaseModel):
    """Server message carrying a proximity alert."""

    type: Literal["alert"] = "alert"
    data: NotificationRequest
    timestamp: datetime


class PongMessage(BaseModel):
    """Pong response for keep-alive."""

    type: Literal["pong"] = "pong"


class ErrorMessage(BaseModel):
    """Error message from server."""

    type: Literal["error"] = "error"
    message: str
