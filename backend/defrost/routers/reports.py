"""API routes for submitting and browsing reports."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from defrost.database import get_db
from defrost.dependencies import Services, get_services
from defrost.rate_limit import limiter, submission_limit
from defrost.schemas.report import Report, ReportCategory, ReportCreate, ReportsResponse
from defrost.services.report_repository import InvalidCursorError, ReportRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reports", tags=["reports"])


async def _refresh_feed(services: Services) -> None:
    """Push the changed report set to the pipeline, like a store listener would."""
    try:
        await services.feed_source.refresh()
    except Exception as e:
        logger.warning(f"Feed refresh after store change failed: {e}")


@router.post("", response_model=Report, status_code=status.HTTP_201_CREATED)
@limiter.limit(submission_limit)
async def submit_report(
    request: Request,
    payload: ReportCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    services: Annotated[Services, Depends(get_services)],
) -> Report:
    """
    Submit an anonymous report.

    The report gets a fresh id and the current timestamp. The feed is refreshed
    right away so nearby users are alerted without waiting for the next poll.
    """
    report = await ReportRepository(db).submit(payload)
    await _refresh_feed(services)
    return report


@router.get("", response_model=ReportsResponse)
async def list_reports(
    db: Annotated[AsyncSession, Depends(get_db)],
    cursor: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    category: ReportCategory | None = Query(None, description="Filter by category"),
) -> ReportsResponse:
    """List stored reports newest first with cursor pagination."""
    try:
        reports, next_cursor = await ReportRepository(db).list_recent(
            limit, cursor=cursor, category=category
        )
    except InvalidCursorError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=400, detail="Invalid cursor")

    return ReportsResponse(reports=reports, next_cursor=next_cursor)


@router.get("/{report_id}", response_model=Report)
async def get_report(
    report_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Report:
    """Get a single report by id."""
    report = await ReportRepository(db).get(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(
    report_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    services: Annotated[Services, Depends(get_services)],
) -> Response:
    """Delete a report. It disappears from the feed on the next snapshot."""
    deleted = await ReportRepository(db).delete(report_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Report not found")

    await _refresh_feed(services)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
