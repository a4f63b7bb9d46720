"""Services around the proximity pipeline: storage, sources and sinks."""

from defrost.services.feed_source import ReportFeedSource
from defrost.services.location import LocationSource
from defrost.services.report_repository import ReportRepository

__all__ = ["LocationSource", "ReportFeedSource", "ReportRepository"]
