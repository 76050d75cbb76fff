"""Report History Routes - what was generated, by whom, and whether it worked."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sis.core.domain_types import ReportType
from sis.infrastructure.database import get_db
from sis.schemas.reports import ReportHistoryResponse
from sis.services.report_history import ReportHistoryService

router = APIRouter(prefix="/api/v1/reports/history", tags=["report-history"])


@router.get("", response_model=list[ReportHistoryResponse])
async def list_report_history(
    report_type: ReportType | None = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await ReportHistoryService(db).recent(
        report_type.value if report_type else None, limit, offset,
    )


@router.get("/stats")
async def report_history_stats(db: AsyncSession = Depends(get_db)):
    return await ReportHistoryService(db).stats()
