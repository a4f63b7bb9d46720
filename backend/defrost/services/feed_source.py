"""Feed source publishing report snapshots into the pipeline."""

import asyncio
import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from defrost.core.events import SnapshotReceived
from defrost.core.pipeline import ProximityPipeline
from defrost.services.report_repository import ReportRepository

logger = logging.getLogger(__name__)


class ReportFeedSource:
    """
    Reads the visible report set from the store and hands it to the pipeline.

    Each refresh delivers a full replacement snapshot, most recent first,
    capped at ``limit`` reports.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        pipeline: ProximityPipeline,
        limit: int = 100,
    ):
        self.session_maker = session_maker
        self.pipeline = pipeline
        self.limit = limit
        self.last_refresh_at: datetime | None = None
        self._lock = asyncio.Lock()

    async def refresh(self) -> int:
        """
        Publish the current snapshot. Returns its size.

        Overlapping refreshes are serialized so snapshots are queued in the
        order they were read.
        """
        async with self._lock:
            async with self.session_maker() as db:
                reports = await ReportRepository(db).snapshot(self.limit)

            await self.pipeline.publish(SnapshotReceived(reports=tuple(reports)))
        self.last_refresh_at = datetime.now(UTC)
        logger.debug(f"Published snapshot of {len(reports)} reports")
        return len(reports)
