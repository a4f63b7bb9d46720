"""API routes for the live feed, location updates and proximity alerts."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from defrost.core.events import AlertsCleared
from defrost.core.formatting import format_distance, time_ago
from defrost.core.geo import Position
from defrost.dependencies import Services, get_services
from defrost.schemas.report import FeedItem, FeedResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["alerts"])


class LocationUpdate(BaseModel):
    """A location fix from the device."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class LocationAccepted(BaseModel):
    accepted: bool


class AuthorizationUpdate(BaseModel):
    enabled: bool


class AlertStatus(BaseModel):
    """Current state of the proximity notifier."""

    position_known: bool
    latitude: float | None = None
    longitude: float | None = None
    alert_radius_m: float
    alerted_count: int
    notifications_authorized: bool
    connections: int


def _status(services: Services) -> AlertStatus:
    position = services.notifier.position
    return AlertStatus(
        position_known=position is not None,
        latitude=position.latitude if position else None,
        longitude=position.longitude if position else None,
        alert_radius_m=services.notifier.alert_radius_m,
        alerted_count=len(services.notifier.alerted_ids),
        notifications_authorized=services.websocket_sink.authorized,
        connections=services.connection_manager.connection_count,
    )


@router.get("/feed", response_model=FeedResponse)
async def get_feed(
    services: Annotated[Services, Depends(get_services)],
) -> FeedResponse:
    """
    Latest feed snapshot with live distances from the user.

    Distances are omitted until the device has reported a position.
    """
    notifier = services.notifier
    items = []
    for report in services.feed.reports:
        meters = notifier.distance_to(report)
        items.append(
            FeedItem(
                report=report,
                distance_m=meters,
                distance_label=format_distance(meters) if meters is not None else None,
                time_ago=time_ago(report.created_at),
            )
        )

    return FeedResponse(items=items, position_known=notifier.position is not None)


@router.post("/location", response_model=LocationAccepted)
async def update_location(
    update: LocationUpdate,
    services: Annotated[Services, Depends(get_services)],
) -> LocationAccepted:
    """Report the device's current location."""
    accepted = await services.location_source.submit_fix(
        Position(latitude=update.latitude, longitude=update.longitude)
    )
    return LocationAccepted(accepted=accepted)


@router.get("/alerts/status", response_model=AlertStatus)
async def alert_status(
    services: Annotated[Services, Depends(get_services)],
) -> AlertStatus:
    return _status(services)


@router.delete("/alerts", response_model=AlertStatus)
async def clear_alerts(
    services: Annotated[Services, Depends(get_services)],
) -> AlertStatus:
    """
    Forget which reports have already alerted.

    Reports that are still new on a later snapshot may alert again.
    """
    await services.pipeline.publish(AlertsCleared())
    await services.pipeline.join()
    return _status(services)


@router.put("/alerts/authorization", response_model=AlertStatus)
async def set_authorization(
    update: AuthorizationUpdate,
    services: Annotated[Services, Depends(get_services)],
) -> AlertStatus:
    """Grant or revoke notification delivery."""
    services.websocket_sink.authorized = update.enabled
    logger.info(f"Notification permission {'granted' if update.enabled else 'revoked'}")
    return _status(services)
