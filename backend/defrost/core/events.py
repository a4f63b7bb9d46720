"""Events consumed by the proximity pipeline."""

from dataclasses import dataclass

from defrost.core.geo import Position
from defrost.schemas.report import Report


@dataclass(frozen=True)
class SnapshotReceived:
    """The feed source delivered a complete report set."""

    reports: tuple[Report, ...]


@dataclass(frozen=True)
class PositionUpdated:
    """The location source delivered a fix."""

    position: Position


@dataclass(frozen=True)
class AlertsCleared:
    """The user asked to forget previously alerted reports."""


PipelineEvent = SnapshotReceived | PositionUpdated | AlertsCleared
