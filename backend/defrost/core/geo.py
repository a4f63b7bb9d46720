"""Great-circle distance helpers for proximity matching."""

import math
from dataclasses import dataclass

EARTH_RADIUS_M = 6371000.0
METERS_PER_MILE = 1609.34
FEET_PER_METER = 3.28084

# 5 miles
ALERT_RADIUS_METERS = 8046.72


@dataclass(frozen=True)
class Position:
    """A WGS-84 coordinate in decimal degrees."""

    latitude: float
    longitude: float


def distance_m(a: Position, b: Position) -> float:
    """
    Haversine distance in meters between two positions.

    Never raises. Non-finite input yields ``inf`` so callers treat the
    point as out of range.
    """
    p1, p2 = math.radians(a.latitude), math.radians(b.latitude)
    dphi = p2 - p1
    dl = math.radians(b.longitude - a.longitude)
    h = math.sin(dphi / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    if not math.isfinite(h):
        return math.inf

    # Out-of-range degrees can push h slightly past 1
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(h))


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def within_alert_radius(meters: float, radius_m: float = ALERT_RADIUS_METERS) -> bool:
    """Inclusive radius check; NaN and infinity are never in range."""
    return math.isfinite(meters) and meters <= radius_m
