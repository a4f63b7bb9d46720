"""Health endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from defrost.database import get_db
from defrost.dependencies import Services, get_services
from defrost.services.report_repository import ReportRepository

router = APIRouter(tags=["health"])


class FeedStatus(BaseModel):
    """Status of the report feed and the alert pipeline."""

    last_refresh: datetime | None
    stored_reports: int
    snapshot_size: int
    pipeline_running: bool
    alerted_count: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    feed: FeedStatus


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: Annotated[AsyncSession, Depends(get_db)],
    services: Annotated[Services, Depends(get_services)],
) -> HealthResponse:
    """
    Health check endpoint with feed status.

    Returns the last snapshot time, store size and pipeline state.
    """
    stored = await ReportRepository(db).count()

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        feed=FeedStatus(
            last_refresh=services.feed_source.last_refresh_at,
            stored_reports=stored,
            snapshot_size=len(services.feed.reports),
            pipeline_running=services.pipeline.running,
            alerted_count=len(services.notifier.alerted_ids),
        ),
    )


@router.get("/ready")
async def readiness_check() -> dict:
    """Simple readiness probe for container orchestration."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict:
    """Simple liveness probe for container orchestration."""
    return {"status": "alive"}
