"""Storage operations for submitted reports."""

import base64
import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from defrost.models import Report as ReportRow
from defrost.schemas.report import Report, ReportCategory, ReportCreate

logger = logging.getLogger(__name__)


class InvalidCursorError(ValueError):
    """Raised when a pagination cursor cannot be decoded."""

    pass


def encode_cursor(created_at: datetime, report_id: str) -> str:
    """Encode cursor for keyset pagination."""
    cursor_str = f"{created_at.isoformat()}|{report_id}"
    return base64.urlsafe_b64encode(cursor_str.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    """Decode cursor for keyset pagination."""
    try:
        cursor_str = base64.urlsafe_b64decode(cursor.encode()).decode()
        created_part, report_id = cursor_str.split("|", 1)
        return datetime.fromisoformat(created_part), report_id
    except ValueError as e:
        raise InvalidCursorError(f"Invalid cursor: {cursor}") from e


class ReportRepository:
    """
    Create, read and delete reports.

    Reports are immutable once stored; there is no update operation.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def submit(self, data: ReportCreate) -> Report:
        """Store a new report with a fresh id and the current timestamp."""
        row = ReportRow(
            id=str(uuid.uuid4()),
            created_at=datetime.now(UTC),
            category=data.category.value,
            location_label=data.location_label,
            latitude=data.latitude,
            longitude=data.longitude,
            narrative=data.narrative,
            media_ref=data.media_ref,
        )
        self.db.add(row)
        await self.db.commit()

        logger.info(f"Report submitted: {row.id} ({row.category} at {row.location_label})")
        return Report.model_validate(row)

    async def get(self, report_id: str) -> Report | None:
        row = await self.db.get(ReportRow, report_id)
        return Report.model_validate(row) if row else None

    async def list_recent(
        self,
        limit: int,
        cursor: str | None = None,
        category: ReportCategory | None = None,
    ) -> tuple[list[Report], str | None]:
        """
        List reports newest first with keyset pagination.

        Returns the page and the cursor for the next one (None on the last page).
        """
        query = select(ReportRow).order_by(
            ReportRow.created_at.desc(),
            ReportRow.id.desc(),
        )

        if cursor:
            cursor_time, cursor_id = decode_cursor(cursor)
            query = query.where(
                (ReportRow.created_at < cursor_time)
                | ((ReportRow.created_at == cursor_time) & (ReportRow.id < cursor_id))
            )

        if category:
            query = query.where(ReportRow.category == category.value)

        # Fetch one extra to check for next page
        result = await self.db.execute(query.limit(limit + 1))
        rows = list(result.scalars().all())

        next_cursor = None
        if len(rows) > limit:
            rows = rows[:limit]
            last = rows[-1]
            next_cursor = encode_cursor(last.created_at, last.id)

        return [Report.model_validate(row) for row in rows], next_cursor

    async def snapshot(self, limit: int) -> list[Report]:
        """The most recent reports, as delivered to the feed."""
        reports, _ = await self.list_recent(limit)
        return reports

    async def delete(self, report_id: str) -> bool:
        """Delete a report. Returns False if it did not exist."""
        result = await self.db.execute(delete(ReportRow).where(ReportRow.id == report_id))
        await self.db.commit()

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Report deleted: {report_id}")
        return deleted

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(ReportRow.id)))
        return result.scalar() or 0
