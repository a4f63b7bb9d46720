"""Tests for distance helpers and display formatting."""

import math
from datetime import UTC, datetime, timedelta

import pytest

from defrost.core.formatting import format_distance, time_ago
from defrost.core.geo import (
    ALERT_RADIUS_METERS,
    Position,
    distance_m,
    meters_to_miles,
    within_alert_radius,
)

from tests.conftest import FAR_AWAY, NEARBY, USER_POSITION


class TestDistance:
    """Tests for haversine distance."""

    def test_identity_is_zero(self):
        """Distance from a point to itself is zero."""
        assert distance_m(USER_POSITION, USER_POSITION) == 0

    @pytest.mark.parametrize(
        "a,b",
        [
            (USER_POSITION, Position(*NEARBY)),
            (Position(-33.8688, 151.2093), Position(51.5074, -0.1278)),
            (Position(0.0, 179.9), Position(0.0, -179.9)),
            (Position(89.9, 10.0), Position(-89.9, -170.0)),
        ],
    )
    def test_symmetric(self, a, b):
        """distance(a, b) == distance(b, a)."""
        assert distance_m(a, b) == distance_m(b, a)

    def test_nearby_report(self):
        """Midtown is about 3.3 miles from lower Manhattan."""
        meters = distance_m(USER_POSITION, Position(*NEARBY))

        assert meters == pytest.approx(5315, abs=50)
        assert meters_to_miles(meters) == pytest.approx(3.3, abs=0.1)

    def test_far_report(self):
        """The Bronx is well outside the alert radius."""
        meters = distance_m(USER_POSITION, Position(*FAR_AWAY))

        assert meters > ALERT_RADIUS_METERS
        assert meters_to_miles(meters) == pytest.approx(10.1, abs=0.3)

    def test_nan_coordinate_does_not_raise(self):
        """NaN input degrades to an infinite distance."""
        assert distance_m(USER_POSITION, Position(math.nan, -74.0)) == math.inf

    def test_out_of_range_degrees_do_not_raise(self):
        """Degrees outside WGS-84 bounds still produce a finite distance."""
        meters = distance_m(USER_POSITION, Position(400.0, 900.0))

        assert math.isfinite(meters)
        assert meters >= 0


class TestAlertRadius:
    """Tests for the inclusive radius check."""

    def test_boundary_is_inclusive(self):
        assert within_alert_radius(8046.72) is True

    def test_just_outside(self):
        assert within_alert_radius(8046.73) is False

    def test_non_finite(self):
        assert within_alert_radius(math.nan) is False
        assert within_alert_radius(math.inf) is False

    def test_custom_radius(self):
        assert within_alert_radius(150.0, radius_m=200.0) is True
        assert within_alert_radius(250.0, radius_m=200.0) is False


class TestFormatting:
    """Tests for feed display labels."""

    def test_format_distance_feet(self):
        """Under a tenth of a mile is shown in feet."""
        assert format_distance(100.0) == "328_FT"

    def test_format_distance_miles(self):
        assert format_distance(5315.0) == "3.3_MI"

    def test_time_ago_minutes(self):
        now = datetime(2026, 1, 18, 12, 0, tzinfo=UTC)

        assert time_ago(now - timedelta(minutes=1), now) == "1_MIN_AGO"
        assert time_ago(now - timedelta(minutes=42), now) == "42_MINS_AGO"

    def test_time_ago_hours_and_days(self):
        now = datetime(2026, 1, 18, 12, 0, tzinfo=UTC)

        assert time_ago(now - timedelta(hours=2), now) == "2_HRS_AGO"
        assert time_ago(now - timedelta(days=1, hours=3), now) == "1_DAY_AGO"

    def test_time_ago_naive_datetime(self):
        """Naive timestamps are treated as UTC."""
        now = datetime(2026, 1, 18, 12, 0, tzinfo=UTC)

        assert time_ago(datetime(2026, 1, 18, 7, 0), now) == "5_HRS_AGO"
