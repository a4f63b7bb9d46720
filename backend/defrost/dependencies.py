"""Explicitly constructed application services and their FastAPI dependencies."""

import logging
from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from defrost.config import Settings
from defrost.core.feed import ReportFeed
from defrost.core.notifier import NotificationSink, ProximityNotifier
from defrost.core.pipeline import ProximityPipeline
from defrost.services.feed_source import ReportFeedSource
from defrost.services.location import LocationSource
from defrost.services.notification_sinks import (
    CompositeNotificationSink,
    WebhookNotificationSink,
    WebSocketNotificationSink,
)
from defrost.websocket.manager import ConnectionManager

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything one device session needs, created once at startup."""

    settings: Settings
    session_maker: async_sessionmaker[AsyncSession]
    connection_manager: ConnectionManager
    websocket_sink: WebSocketNotificationSink
    pipeline: ProximityPipeline
    feed_source: ReportFeedSource
    location_source: LocationSource

    @property
    def feed(self) -> ReportFeed:
        return self.pipeline.feed

    @property
    def notifier(self) -> ProximityNotifier:
        return self.pipeline.notifier


def create_services(
    settings: Settings,
    session_maker: async_sessionmaker[AsyncSession],
) -> Services:
    """Wire the pipeline, its sources and its sinks."""
    connection_manager = ConnectionManager()
    websocket_sink = WebSocketNotificationSink(
        connection_manager, authorized=settings.notifications_enabled
    )

    sink: NotificationSink = websocket_sink
    if settings.notification_webhook_url:
        webhook_sink = WebhookNotificationSink(
            settings.notification_webhook_url,
            timeout=settings.notification_webhook_timeout,
        )
        sink = CompositeNotificationSink([websocket_sink, webhook_sink])
        logger.info(f"Alert webhook enabled: {settings.notification_webhook_url}")

    notifier = ProximityNotifier(sink, alert_radius_m=settings.alert_radius_meters)
    pipeline = ProximityPipeline(
        ReportFeed(),
        notifier,
        suppress_initial_snapshot=settings.suppress_initial_snapshot,
    )

    return Services(
        settings=settings,
        session_maker=session_maker,
        connection_manager=connection_manager,
        websocket_sink=websocket_sink,
        pipeline=pipeline,
        feed_source=ReportFeedSource(
            session_maker, pipeline, limit=settings.feed_snapshot_limit
        ),
        location_source=LocationSource(
            pipeline, distance_filter_m=settings.location_distance_filter_meters
        ),
    )


def get_services(request: Request) -> Services:
    """Dependency returning the services attached at startup."""
    return request.app.state.services
