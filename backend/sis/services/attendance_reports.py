"""Attendance Report Service - daily, summary and chronic absenteeism reports in xlsx/pdf/csv.

Invariants:
    - Every generation (success or failure) lands in report_history
    - Daily Excel reports are served from the report cache when present
    - Render failures surface as ReportGenerationError after the FAILED row is committed
    - Pure tallies come from core/attendance_math; rendering from sis.reports

Design Decisions:
    - build_* methods return (bytes, filename) and never touch HTTP: batch export reuses them
      to fill archives
    - Records loaded with a single join per request; the per-student grouping is pure Python
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sis.config import Settings
from sis.core import attendance_math
from sis.core.dates import validate_range
from sis.core.domain_types import ReportFormat, ReportStatus, ReportType
from sis.core.errors import InvalidRequestError, ReportGenerationError
from sis.infrastructure.report_cache import ReportCache
from sis.models.attendance_record import AttendanceRecord
from sis.models.student import Student
from sis.reports.render import render
from sis.reports.table import chronic_table, daily_table, summary_table
from sis.services.report_history import ReportHistoryService

logger = logging.getLogger(__name__)


@dataclass
class RenderedReport:
    content: bytes
    filename: str
    media_type: str


def daily_filename(day: date, fmt: ReportFormat) -> str:
    return f"daily-attendance-{day.isoformat()}.{fmt.extension}"


def summary_filename(start: date, end: date, fmt: ReportFormat) -> str:
    return f"attendance-summary-{start.isoformat()}-to-{end.isoformat()}.{fmt.extension}"


def chronic_filename(start: date, end: date, fmt: ReportFormat) -> str:
    return f"chronic-absenteeism-{start.isoformat()}-to-{end.isoformat()}.{fmt.extension}"


def _check_threshold(threshold: float) -> None:
    if not 0 <= threshold <= 100:
        raise InvalidRequestError(
            f"Threshold {threshold} must be between 0 and 100", field="threshold",
        )


class AttendanceReportService:
    """Generates attendance reports and records their history."""

    def __init__(
        self, db: AsyncSession, settings: Settings, cache: ReportCache, actor: str,
    ):
        self.db = db
        self.settings = settings
        self.cache = cache
        self.actor = actor
        self.history = ReportHistoryService(db)

    async def load_records(self, start: date, end: date) -> list[dict]:
        result = await self.db.execute(
            select(AttendanceRecord, Student)
            .join(Student, Student.id == AttendanceRecord.student_id)
            .where(AttendanceRecord.attendance_date >= start)
            .where(AttendanceRecord.attendance_date <= end)
            .order_by(AttendanceRecord.attendance_date, Student.last_name),
        )
        return [
            {
                "student_id": student.id,
                "student_number": student.student_number,
                "student_name": f"{student.last_name}, {student.first_name}",
                "grade_level": student.grade_level,
                "attendance_date": record.attendance_date,
                "status": record.status,
                "notes": record.notes,
            }
            for record, student in result.all()
        ]

    # ─── Content builders (no history, no cache) ────────────────

    async def build_daily(self, day: date, fmt: ReportFormat) -> bytes:
        records = await self.load_records(day, day)
        table = daily_table(
            self.settings.school_name, day, records, attendance_math.tally(records),
        )
        return render(table, fmt)

    async def build_summary(self, start: date, end: date, fmt: ReportFormat) -> bytes:
        validate_range(start, end)
        records = await self.load_records(start, end)
        table = summary_table(
            self.settings.school_name, start, end,
            attendance_math.summarize_by_student(records),
            attendance_math.tally(records),
        )
        return render(table, fmt)

    async def build_chronic(
        self, start: date, end: date, threshold: float, fmt: ReportFormat,
    ) -> bytes:
        validate_range(start, end)
        _check_threshold(threshold)
        records = await self.load_records(start, end)
        table = chronic_table(
            self.settings.school_name, start, end, threshold,
            attendance_math.find_chronic_absentees(records, threshold),
        )
        return render(table, fmt)

    # ─── Tracked generation (history + cache) ───────────────────

    async def _tracked(
        self,
        report_type: ReportType,
        fmt: ReportFormat,
        filename: str,
        parameters: dict,
        builder,
    ) -> RenderedReport:
        try:
            content = await builder()
        except ReportGenerationError as e:
            self.history.record(
                report_type.value, fmt.value, self.actor, parameters, filename,
                status=ReportStatus.FAILED, error_message=e.message,
            )
            await self.db.commit()
            raise
        self.history.record(
            report_type.value, fmt.value, self.actor, parameters, filename,
            size_bytes=len(content),
        )
        await self.db.commit()
        return RenderedReport(content, filename, fmt.media_type)

    async def daily(self, day: date, fmt: ReportFormat) -> RenderedReport:
        filename = daily_filename(day, fmt)
        cache_key = f"daily:{fmt.value}:{day.isoformat()}"

        async def build() -> bytes:
            if fmt == ReportFormat.EXCEL:
                cached = self.cache.get(cache_key)
                if cached is not None:
                    logger.debug(f"Daily report cache hit for {day}")
                    return cached
            content = await self.build_daily(day, fmt)
            if fmt == ReportFormat.EXCEL:
                self.cache.put(cache_key, content)
            return content

        return await self._tracked(
            ReportType.DAILY, fmt, filename, {"date": day.isoformat()}, build,
        )

    async def summary(self, start: date, end: date, fmt: ReportFormat) -> RenderedReport:
        validate_range(start, end)
        return await self._tracked(
            ReportType.SUMMARY, fmt, summary_filename(start, end, fmt),
            {"start_date": start.isoformat(), "end_date": end.isoformat()},
            lambda: self.build_summary(start, end, fmt),
        )

    async def chronic(
        self, start: date, end: date, threshold: float, fmt: ReportFormat,
    ) -> RenderedReport:
        validate_range(start, end)
        _check_threshold(threshold)
        return await self._tracked(
            ReportType.CHRONIC_ABSENTEEISM, fmt, chronic_filename(start, end, fmt),
            {
                "start_date": start.isoformat(), "end_date": end.isoformat(),
                "threshold": threshold,
            },
            lambda: self.build_chronic(start, end, threshold, fmt),
        )
