"""Proximity matching with at-most-once alerting."""

import logging
import threading
from collections.abc import Iterable
from typing import Protocol

from pydantic import BaseModel

from defrost.core.geo import (
    ALERT_RADIUS_METERS,
    Position,
    distance_m,
    meters_to_miles,
    within_alert_radius,
)
from defrost.schemas.report import Report

logger = logging.getLogger(__name__)

ALERT_TITLE = "DEFROST ALERT"


class NotificationRequest(BaseModel):
    """Outbound alert handed to a notification sink."""

    identifier: str
    title: str
    body: str
    payload: dict[str, str | float | int | bool]


class NotificationSinkError(Exception):
    """Raised when a sink refuses to accept a notification request."""

    pass


class NotificationSink(Protocol):
    """Anything that can accept a notification request."""

    def emit(self, request: NotificationRequest) -> None: ...


def build_request(report: Report, meters: float) -> NotificationRequest:
    """Build the alert for a report at the given distance."""
    miles = meters_to_miles(meters)
    return NotificationRequest(
        identifier=report.id,
        title=ALERT_TITLE,
        body=f"Alert: {report.category.value} reported {miles:.1f} miles away",
        payload={
            "report_id": report.id,
            "category": report.category.value,
            "distance_miles": round(miles, 1),
            "location_label": report.location_label,
        },
    )


class ProximityNotifier:
    """
    Emits one notification per report that arrives within the alert radius.

    Holds the latest user position and the set of already-alerted report ids.
    A report evaluated while out of range (or before any position is known)
    is not remembered and may alert on a later evaluate call. Alerted ids are
    kept until clear(), whether or not the sink delivered.
    """

    def __init__(
        self,
        sink: NotificationSink,
        alert_radius_m: float = ALERT_RADIUS_METERS,
    ):
        self.sink = sink
        self.alert_radius_m = alert_radius_m
        self._position: Position | None = None
        self._alerted: set[str] = set()
        self._lock = threading.Lock()

    @property
    def position(self) -> Position | None:
        return self._position

    @property
    def alerted_ids(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._alerted)

    def update_position(self, position: Position) -> None:
        """Replace the stored position. Earlier reports are not re-checked."""
        with self._lock:
            self._position = position
        logger.debug(f"User position updated: {position.latitude}, {position.longitude}")

    def distance_to(self, report: Report) -> float | None:
        """Distance in meters from the user, or None if no position is known."""
        position = self._position
        if position is None:
            return None
        return distance_m(position, report.position)

    def evaluate(self, reports: Iterable[Report]) -> list[NotificationRequest]:
        """
        Check newly-arrived reports against the current position, in order.

        Returns the requests handed to the sink during this call.
        """
        emitted: list[NotificationRequest] = []

        with self._lock:
            for report in reports:
                if report.id in self._alerted:
                    continue

                if self._position is None:
                    logger.debug(f"No user position yet, skipping report {report.id}")
                    continue

                meters = distance_m(self._position, report.position)
                if not within_alert_radius(meters, self.alert_radius_m):
                    continue

                request = build_request(report, meters)
                self._alerted.add(report.id)
                emitted.append(request)
                self._emit(request)

        return emitted

    def _emit(self, request: NotificationRequest) -> None:
        try:
            self.sink.emit(request)
            logger.info(f"Notification sent: {request.body}")
        except Exception as e:
            logger.warning(f"Notification for report {request.identifier} not delivered: {e}")

    def clear(self) -> None:
        """Forget every alerted report id."""
        with self._lock:
            self._alerted.clear()
        logger.info("Cleared alerted reports")
