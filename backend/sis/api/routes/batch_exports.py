"""Batch Export Routes - ZIP archives of attendance reports.

Invariants:
    - Responses are application/zip attachments
    - Disabled feature → 409 FEATURE_DISABLED; oversized batch → 400
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from sis.api.dependencies import get_actor, get_attendance_reports
from sis.api.routes.attendance_reports import download
from sis.config import Settings, get_settings
from sis.core.dates import default_range
from sis.core.domain_types import ReportFormat
from sis.schemas.reports import CustomBatchRequest
from sis.services.attendance_reports import AttendanceReportService
from sis.services.batch_export import BatchExportService

router = APIRouter(prefix="/api/v1/reports/batch", tags=["batch-exports"])


def get_batch_service(
    reports: AttendanceReportService = Depends(get_attendance_reports),
    settings: Settings = Depends(get_settings),
    actor: str = Depends(get_actor),
) -> BatchExportService:
    return BatchExportService(reports, settings, actor)


@router.get("/info")
async def batch_info(service: BatchExportService = Depends(get_batch_service)):
    return service.info()


@router.get("/daily")
async def batch_daily(
    start_date: date | None = None,
    end_date: date | None = None,
    format: ReportFormat = ReportFormat.EXCEL,
    service: BatchExportService = Depends(get_batch_service),
):
    start, end = default_range(start_date, end_date, date.today())
    return download(await service.daily_range(start, end, format))


@router.get("/summary-with-chronic")
async def batch_summary_with_chronic(
    start_date: date | None = None,
    end_date: date | None = None,
    threshold: float | None = Query(None, ge=0, le=100),
    format: ReportFormat = ReportFormat.EXCEL,
    service: BatchExportService = Depends(get_batch_service),
):
    start, end = default_range(start_date, end_date, date.today())
    if threshold is None:
        threshold = service.settings.default_chronic_threshold
    return download(await service.summary_with_chronic(start, end, threshold, format))


@router.post("/custom")
async def batch_custom(
    body: CustomBatchRequest,
    service: BatchExportService = Depends(get_batch_service),
):
    return download(await service.custom(body.reports))
