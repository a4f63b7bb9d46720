"""Pydantic schemas for incident reports."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from defrost.core.geo import Position


class ReportCategory(str, Enum):
    """Kind of activity a report describes."""

    CHECKPOINT = "CHECKPOINT"
    PATROL = "PATROL"
    RAID = "RAID"


class Report(BaseModel):
    """
    A single anonymous observation of activity at a location.

    Immutable once created. The id is stable across feed snapshots.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    created_at: datetime
    category: ReportCategory
    location_label: str
    latitude: float
    longitude: float
    narrative: str
    media_ref: str | None = None

    @property
    def position(self) -> Position:
        return Position(latitude=self.latitude, longitude=self.longitude)


class ReportCreate(BaseModel):
    """Report submission payload."""

    category: ReportCategory
    location_label: str = Field(..., max_length=255)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    narrative: str = Field(..., max_length=4000)
    media_ref: str | None = Field(None, max_length=512)

    @field_validator("location_label", "narrative")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class ReportsResponse(BaseModel):
    """Paginated response for stored reports."""

    reports: list[Report]
    next_cursor: str | None = None


class FeedItem(BaseModel):
    """A report from the live feed, with its distance from the user."""

    report: Report
    distance_m: float | None = None
    distance_label: str | None = None
    time_ago: str


class FeedResponse(BaseModel):
    """Latest feed snapshot as seen by the device."""

    items: list[FeedItem]
    position_known: bool
