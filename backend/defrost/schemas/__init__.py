"""Pydantic schemas for API request/response validation."""

from defrost.schemas.report import (
    FeedItem,
    FeedResponse,
    Report,
    ReportCategory,
    ReportCreate,
    ReportsResponse,
)

__all__ = [
    "FeedItem",
    "FeedResponse",
    "Report",
    "ReportCategory",
    "ReportCreate",
    "ReportsResponse",
]
