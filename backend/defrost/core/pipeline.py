"""Single-consumer event loop driving the report feed and the notifier."""

import asyncio
import logging

from defrost.core.events import (
    AlertsCleared,
    PipelineEvent,
    PositionUpdated,
    SnapshotReceived,
)
from defrost.core.feed import ReportFeed
from defrost.core.notifier import NotificationRequest, ProximityNotifier

logger = logging.getLogger(__name__)


class ProximityPipeline:
    """
    Serializes feed and location events through one queue.

    Feed snapshots and location fixes arrive from independent sources; every
    mutation goes through handle(), called only by the consumer task (or
    directly by callers that own the pipeline).

    When suppress_initial_snapshot is set, the first snapshot of the session
    only seeds the feed so the existing backlog does not trigger alerts.
    """

    def __init__(
        self,
        feed: ReportFeed,
        notifier: ProximityNotifier,
        suppress_initial_snapshot: bool = True,
    ):
        self.feed = feed
        self.notifier = notifier
        self.suppress_initial_snapshot = suppress_initial_snapshot
        self._queue: asyncio.Queue[PipelineEvent] = asyncio.Queue()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def handle(self, event: PipelineEvent) -> list[NotificationRequest]:
        """Apply one event and return any notifications it produced."""
        if isinstance(event, SnapshotReceived):
            return self._handle_snapshot(event)
        if isinstance(event, PositionUpdated):
            self.notifier.update_position(event.position)
            return []
        if isinstance(event, AlertsCleared):
            self.notifier.clear()
            return []

        logger.warning(f"Unknown pipeline event: {event!r}")
        return []

    def _handle_snapshot(self, event: SnapshotReceived) -> list[NotificationRequest]:
        first = not self.feed.has_snapshot
        added = self.feed.apply_snapshot(event.reports)

        logger.info(
            f"Report update detected: total={len(event.reports)} new={len(added)}"
        )

        if first and self.suppress_initial_snapshot:
            if added:
                logger.info(f"Initial snapshot seeded with {len(added)} existing reports")
            return []

        if not added:
            return []

        emitted = self.notifier.evaluate(added)
        logger.info(
            f"Finished checking {len(added)} new report(s), {len(emitted)} alert(s)"
        )
        return emitted

    async def publish(self, event: PipelineEvent) -> None:
        """Queue an event for the consumer task."""
        await self._queue.put(event)

    def publish_nowait(self, event: PipelineEvent) -> None:
        self._queue.put_nowait(event)

    async def join(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                self.handle(event)
            except Exception as e:
                logger.error(f"Failed to handle {type(event).__name__}: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        """Start the consumer task on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._consume(), name="proximity-pipeline")
        logger.info("Proximity pipeline started")

    async def stop(self) -> None:
        """Cancel the consumer task. Unprocessed events are dropped."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Proximity pipeline stopped")
