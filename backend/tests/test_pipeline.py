"""Tests for the proximity pipeline event handling."""

import pytest

from defrost.core.events import AlertsCleared, PositionUpdated, SnapshotReceived
from defrost.core.feed import ReportFeed
from defrost.core.geo import Position
from defrost.core.notifier import ProximityNotifier
from defrost.core.pipeline import ProximityPipeline

from tests.conftest import FAR_AWAY, USER_POSITION


@pytest.fixture
def pipeline(sink) -> ProximityPipeline:
    return ProximityPipeline(ReportFeed(), ProximityNotifier(sink))


def snapshot(*reports) -> SnapshotReceived:
    return SnapshotReceived(reports=tuple(reports))


class TestProximityPipeline:
    """Tests for ProximityPipeline.handle."""

    def test_initial_snapshot_is_suppressed(self, pipeline, sink, make_report):
        """The backlog present at startup never alerts."""
        pipeline.handle(PositionUpdated(USER_POSITION))

        assert pipeline.handle(snapshot(make_report("old"))) == []
        sink.emit.assert_not_called()
        assert pipeline.feed.has_snapshot is True

    def test_new_report_after_initial_snapshot(self, pipeline, sink, make_report):
        pipeline.handle(PositionUpdated(USER_POSITION))
        pipeline.handle(snapshot(make_report("old")))

        emitted = pipeline.handle(snapshot(make_report("new"), make_report("old")))

        assert [r.identifier for r in emitted] == ["new"]

    def test_suppression_disabled(self, sink, make_report):
        pipeline = ProximityPipeline(
            ReportFeed(), ProximityNotifier(sink), suppress_initial_snapshot=False
        )
        pipeline.handle(PositionUpdated(USER_POSITION))

        emitted = pipeline.handle(snapshot(make_report("old")))

        assert [r.identifier for r in emitted] == ["old"]

    def test_redelivered_snapshots_alert_once(self, pipeline, sink, make_report):
        pipeline.handle(PositionUpdated(USER_POSITION))
        pipeline.handle(snapshot())

        for _ in range(3):
            pipeline.handle(snapshot(make_report("r1")))

        assert sink.emit.call_count == 1

    def test_report_before_position_is_not_retried(self, pipeline, sink, make_report):
        """A report that arrived before any fix stays unalerted once it is no longer new."""
        pipeline.handle(snapshot())
        pipeline.handle(snapshot(make_report("r1")))

        pipeline.handle(PositionUpdated(USER_POSITION))
        pipeline.handle(snapshot(make_report("r1")))

        sink.emit.assert_not_called()

    def test_position_between_snapshots(self, pipeline, sink, make_report):
        """A fix only affects reports that arrive after it."""
        pipeline.handle(PositionUpdated(USER_POSITION))
        pipeline.handle(snapshot())
        pipeline.handle(snapshot(make_report("far", *FAR_AWAY)))

        pipeline.handle(PositionUpdated(Position(*FAR_AWAY)))
        emitted = pipeline.handle(
            snapshot(make_report("far", *FAR_AWAY), make_report("next", *FAR_AWAY))
        )

        assert [r.identifier for r in emitted] == ["next"]

    def test_alerts_cleared(self, pipeline, make_report):
        pipeline.handle(PositionUpdated(USER_POSITION))
        pipeline.handle(snapshot())
        pipeline.handle(snapshot(make_report("r1")))
        assert pipeline.notifier.alerted_ids == {"r1"}

        pipeline.handle(AlertsCleared())

        assert pipeline.notifier.alerted_ids == frozenset()

    def test_unknown_event_is_ignored(self, pipeline):
        assert pipeline.handle(object()) == []


class TestPipelineConsumer:
    """Tests for the queued consumer task."""

    @pytest.mark.asyncio
    async def test_publish_and_join(self, pipeline, sink, make_report):
        pipeline.start()
        try:
            await pipeline.publish(PositionUpdated(USER_POSITION))
            await pipeline.publish(snapshot())
            pipeline.publish_nowait(snapshot(make_report("r1")))
            await pipeline.join()
        finally:
            await pipeline.stop()

        sink.emit.assert_called_once()
        assert pipeline.running is False

    @pytest.mark.asyncio
    async def test_consumer_survives_handler_error(self, pipeline, sink, make_report):
        pipeline.start()
        try:
            await pipeline.publish(SnapshotReceived(reports=None))  # not iterable
            await pipeline.publish(PositionUpdated(USER_POSITION))
            await pipeline.join()

            assert pipeline.running is True
            assert pipeline.notifier.position == USER_POSITION
        finally:
            await pipeline.stop()

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, pipeline):
        pipeline.start()
        task = pipeline._task
        pipeline.start()

        assert pipeline._task is task
        await pipeline.stop()
        await pipeline.stop()
