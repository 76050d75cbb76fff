"""Attendance Report Routes - daily, summary and chronic absenteeism downloads.

Invariants:
    - Every response is an attachment (Content-Disposition) with the format's media type
    - Daily date defaults to yesterday; ranges default to first-of-month → today
    - start_date > end_date → 400; rendering failure → 500 REPORT_GENERATION_FAILED
    - email=true schedules delivery after the response; mail failures never fail the request

Design Decisions:
    - Format is a path segment bound to ReportFormat (excel | pdf | csv)
    - Chronic absenteeism keeps a bare path for the Excel variant
"""

import logging
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response

from sis.api.dependencies import get_attendance_reports
from sis.config import Settings, get_settings
from sis.core.dates import default_daily_date, default_range
from sis.core.domain_types import ReportFormat
from sis.infrastructure.report_mailer import ReportMailer, get_report_mailer
from sis.services.attendance_reports import AttendanceReportService, RenderedReport

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/reports/attendance", tags=["attendance-reports"])


def download(report: RenderedReport) -> Response:
    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )


def _schedule_email(
    background: BackgroundTasks,
    mailer: ReportMailer,
    school_name: str,
    title: str,
    report: RenderedReport,
) -> None:
    background.add_task(
        mailer.send_report,
        f"{school_name}: {title}",
        f"{title} is attached ({report.filename}).",
        report.content,
        report.filename,
        report.media_type,
    )
    logger.info(f"Queued e-mail delivery for {report.filename}")


@router.get("/daily/{fmt}")
async def daily_report(
    fmt: ReportFormat,
    background: BackgroundTasks,
    report_date: date | None = Query(None, alias="date"),
    email: bool = False,
    reports: AttendanceReportService = Depends(get_attendance_reports),
    mailer: ReportMailer = Depends(get_report_mailer),
    settings: Settings = Depends(get_settings),
):
    day = default_daily_date(report_date, date.today())
    report = await reports.daily(day, fmt)
    if email:
        _schedule_email(
            background, mailer, settings.school_name,
            f"Daily attendance report for {day.isoformat()}", report,
        )
    return download(report)


@router.get("/summary/{fmt}")
async def summary_report(
    fmt: ReportFormat,
    start_date: date | None = None,
    end_date: date | None = None,
    reports: AttendanceReportService = Depends(get_attendance_reports),
):
    start, end = default_range(start_date, end_date, date.today())
    return download(await reports.summary(start, end, fmt))


async def _chronic(
    fmt: ReportFormat,
    start_date: date | None,
    end_date: date | None,
    threshold: float | None,
    reports: AttendanceReportService,
) -> Response:
    start, end = default_range(start_date, end_date, date.today())
    if threshold is None:
        threshold = reports.settings.default_chronic_threshold
    return download(await reports.chronic(start, end, threshold, fmt))


@router.get("/chronic-absenteeism")
async def chronic_absenteeism_report(
    start_date: date | None = None,
    end_date: date | None = None,
    threshold: float | None = Query(None, ge=0, le=100),
    reports: AttendanceReportService = Depends(get_attendance_reports),
):
    return await _chronic(ReportFormat.EXCEL, start_date, end_date, threshold, reports)


@router.get("/chronic-absenteeism/{fmt}")
async def chronic_absenteeism_report_as(
    fmt: ReportFormat,
    start_date: date | None = None,
    end_date: date | None = None,
    threshold: float | None = Query(None, ge=0, le=100),
    reports: AttendanceReportService = Depends(get_attendance_reports),
):
    return await _chronic(fmt, start_date, end_date, threshold, reports)
