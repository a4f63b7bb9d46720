"""Snapshot diffing for the report feed."""

import logging
import threading
from collections.abc import Iterable

from defrost.schemas.report import Report

logger = logging.getLogger(__name__)


class ReportFeed:
    """
    Tracks the last complete report snapshot and finds newly-appeared reports.

    Only identifier membership matters: a report whose content changed between
    snapshots is not considered new.
    """

    def __init__(self):
        self._reports: tuple[Report, ...] = ()
        self._ids: frozenset[str] | None = None
        self._lock = threading.Lock()

    @property
    def has_snapshot(self) -> bool:
        """Whether any snapshot has been applied yet."""
        return self._ids is not None

    @property
    def reports(self) -> tuple[Report, ...]:
        """Reports in the latest snapshot, in delivery order."""
        return self._reports

    def apply_snapshot(self, reports: Iterable[Report]) -> list[Report]:
        """
        Replace the stored snapshot and return reports not seen in the previous one.

        The first snapshot returns every report. Input order is preserved and a
        repeated id within one snapshot is returned once.
        """
        snapshot = tuple(reports)

        with self._lock:
            previous = self._ids or frozenset()
            added: list[Report] = []
            seen: set[str] = set()
            for report in snapshot:
                if report.id in previous or report.id in seen:
                    continue
                seen.add(report.id)
                added.append(report)

            self._ids = frozenset(r.id for r in snapshot)
            self._reports = snapshot

        logger.debug(
            f"Snapshot applied: total={len(snapshot)} previous={len(previous)} new={len(added)}"
        )
        return added
