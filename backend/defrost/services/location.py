"""Location source turning device fixes into pipeline events."""

import logging

from defrost.core.events import PositionUpdated
from defrost.core.geo import Position, distance_m
from defrost.core.pipeline import ProximityPipeline

logger = logging.getLogger(__name__)


class LocationSource:
    """
    Accepts location fixes from the device.

    Fixes closer than ``distance_filter_m`` to the last accepted one are
    dropped; every other fix supersedes the previous position.
    """

    def __init__(self, pipeline: ProximityPipeline, distance_filter_m: float = 100.0):
        self.pipeline = pipeline
        self.distance_filter_m = distance_filter_m
        self.last_accepted: Position | None = None

    async def submit_fix(self, position: Position) -> bool:
        """Publish the fix unless it falls inside the movement filter."""
        if self.last_accepted is not None:
            moved = distance_m(self.last_accepted, position)
            if moved < self.distance_filter_m:
                logger.debug(f"Ignoring fix {moved:.0f}m from last accepted position")
                return False

        self.last_accepted = position
        await self.pipeline.publish(PositionUpdated(position=position))
        logger.info(f"User location updated: {position.latitude}, {position.longitude}")
        return True
