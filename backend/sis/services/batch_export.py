"""Batch Export Service - bundles many attendance reports into one ZIP archive.

Invariants:
    - Disabled feature → FeatureDisabledError (409) before any work
    - Report count above batch_export_max_size → InvalidRequestError with
      "Batch size (N) exceeds maximum allowed (M)"
    - Every archive holds MANIFEST.txt and SUMMARY.txt; ERRORS.txt only when something failed
    - One failed report never aborts the batch; it is listed in ERRORS.txt instead
    - Each archive is recorded in report_history as a BATCH entry

Design Decisions:
    - zipfile in memory (BytesIO): archives are bounded by max batch size
    - Individual reports are built without their own history rows; the archive is the unit
"""

import io
import logging
import zipfile
from datetime import date

from sis.config import Settings
from sis.core import batch_manifest
from sis.core.batch_manifest import BatchOutcome
from sis.core.dates import day_count, iter_days, utcnow, validate_range
from sis.core.domain_types import ReportFormat, ReportType
from sis.core.errors import FeatureDisabledError, InvalidRequestError, SisError
from sis.schemas.reports import BatchReportItem
from sis.services.attendance_reports import (
    AttendanceReportService, RenderedReport, chronic_filename, summary_filename,
)
from sis.services.report_history import ReportHistoryService

logger = logging.getLogger(__name__)

ZIP_MEDIA_TYPE = "application/zip"
SUPPORTED_FORMATS = [f.value for f in ReportFormat]


class BatchExportService:
    """Builds ZIP archives from attendance report builders."""

    def __init__(
        self, reports: AttendanceReportService, settings: Settings, actor: str,
    ):
        self.reports = reports
        self.settings = settings
        self.actor = actor
        self.history = ReportHistoryService(reports.db)

    def info(self) -> dict:
        return {
            "enabled": self.settings.batch_export_enabled,
            "max_batch_size": self.settings.batch_export_max_size,
            "supported_formats": SUPPORTED_FORMATS,
        }

    def _check_batch(self, size: int) -> None:
        if not self.settings.batch_export_enabled:
            raise FeatureDisabledError("Batch export")
        limit = self.settings.batch_export_max_size
        if size > limit:
            raise InvalidRequestError(
                f"Batch size ({size}) exceeds maximum allowed ({limit})",
            )

    async def _add(self, archive: zipfile.ZipFile, outcome: BatchOutcome, name: str, build):
        try:
            content = await build()
        except SisError as e:
            logger.warning(f"Batch entry {name} failed: {e.message}")
            outcome.errors.append(f"{name}: {e.message}")
            return
        archive.writestr(name, content)
        outcome.files.append(name)

    async def _finish(
        self,
        buffer: io.BytesIO,
        archive: zipfile.ZipFile,
        outcome: BatchOutcome,
        fmt_label: str,
        filename: str,
        parameters: dict,
    ) -> RenderedReport:
        archive.writestr(
            "MANIFEST.txt",
            batch_manifest.build_manifest(outcome, utcnow(), self.actor, fmt_label),
        )
        errors = batch_manifest.build_errors(outcome)
        if errors:
            archive.writestr("ERRORS.txt", errors)
        archive.writestr("SUMMARY.txt", batch_manifest.build_summary(outcome))
        archive.close()
        content = buffer.getvalue()

        self.history.record(
            ReportType.BATCH.value, fmt_label, self.actor,
            {**parameters, "successful": len(outcome.files), "failed": len(outcome.errors)},
            filename, size_bytes=len(content),
        )
        await self.reports.db.commit()
        logger.info(
            f"Batch export {filename}: {len(outcome.files)}/{outcome.total} reports",
            extra={"report_type": ReportType.BATCH.value, "actor": self.actor},
        )
        return RenderedReport(content, filename, ZIP_MEDIA_TYPE)

    async def daily_range(self, start: date, end: date, fmt: ReportFormat) -> RenderedReport:
        validate_range(start, end)
        self._check_batch(day_count(start, end))

        buffer = io.BytesIO()
        archive = zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED)
        outcome = BatchOutcome()
        for day in iter_days(start, end):
            await self._add(
                archive, outcome, batch_manifest.daily_batch_filename(day, fmt),
                lambda day=day: self.reports.build_daily(day, fmt),
            )
        return await self._finish(
            buffer, archive, outcome, fmt.value,
            f"batch-daily-{start.isoformat()}-to-{end.isoformat()}.zip",
            {"start_date": start.isoformat(), "end_date": end.isoformat()},
        )

    async def summary_with_chronic(
        self, start: date, end: date, threshold: float, fmt: ReportFormat,
    ) -> RenderedReport:
        validate_range(start, end)
        self._check_batch(2)

        buffer = io.BytesIO()
        archive = zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED)
        outcome = BatchOutcome()
        await self._add(
            archive, outcome, summary_filename(start, end, fmt),
            lambda: self.reports.build_summary(start, end, fmt),
        )
        await self._add(
            archive, outcome, chronic_filename(start, end, fmt),
            lambda: self.reports.build_chronic(start, end, threshold, fmt),
        )
        return await self._finish(
            buffer, archive, outcome, fmt.value,
            f"batch-summary-{start.isoformat()}-to-{end.isoformat()}.zip",
            {
                "start_date": start.isoformat(), "end_date": end.isoformat(),
                "threshold": threshold,
            },
        )

    def _builder_for(self, item: BatchReportItem):
        if item.type == ReportType.DAILY:
            return lambda: self.reports.build_daily(item.date, item.format)
        if item.type == ReportType.SUMMARY:
            return lambda: self.reports.build_summary(item.start_date, item.end_date, item.format)
        threshold = (
            item.threshold if item.threshold is not None
            else self.settings.default_chronic_threshold
        )
        return lambda: self.reports.build_chronic(
            item.start_date, item.end_date, threshold, item.format,
        )

    async def custom(self, items: list[BatchReportItem]) -> RenderedReport:
        self._check_batch(len(items))

        buffer = io.BytesIO()
        archive = zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED)
        outcome = BatchOutcome()
        used: set[str] = set()
        for item in items:
            name = item.filename or batch_manifest.default_custom_filename(
                item.type, item.format, item.date, item.start_date, item.end_date,
            )
            if name in used:
                outcome.errors.append(f"{name}: duplicate filename in batch")
                continue
            used.add(name)
            await self._add(archive, outcome, name, self._builder_for(item))

        formats = sorted({s.format.value for s in items})
        fmt_label = formats[0] if len(formats) == 1 else "mixed"
        return await self._finish(
            buffer, archive, outcome, fmt_label,
            f"batch-custom-{utcnow().strftime('%Y%m%d%H%M%S')}.zip",
            {"report_count": len(items)},
        )
