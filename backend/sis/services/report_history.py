"""Report History Service - persists one row per generated report and summarises them.

Invariants:
    - record() adds to the session; callers commit
    - Failed generations are recorded with status FAILED and the error message
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sis.core.domain_types import ReportStatus
from sis.models.report_history import ReportHistory

logger = logging.getLogger(__name__)


class ReportHistoryService:

    def __init__(self, db: AsyncSession):
        self.db = db

    def record(
        self,
        report_type: str,
        report_format: str,
        generated_by: str,
        parameters: dict | None = None,
        filename: str | None = None,
        size_bytes: int = 0,
        status: ReportStatus = ReportStatus.SUCCESS,
        error_message: str | None = None,
    ) -> ReportHistory:
        entry = ReportHistory(
            report_type=report_type,
            report_format=report_format,
            parameters=parameters,
            filename=filename,
            size_bytes=size_bytes,
            generated_by=generated_by,
            status=status.value,
            error_message=error_message,
        )
        self.db.add(entry)
        logger.info(
            f"Report {filename or report_type} {status.value.lower()} ({size_bytes} bytes)",
            extra={"report_type": report_type, "report_format": report_format,
                   "actor": generated_by},
        )
        return entry

    async def recent(
        self, report_type: str | None = None, limit: int = 50, offset: int = 0,
    ) -> list[ReportHistory]:
        stmt = select(ReportHistory).order_by(
            ReportHistory.created_at.desc(), ReportHistory.id.desc(),
        )
        if report_type:
            stmt = stmt.where(ReportHistory.report_type == report_type)
        result = await self.db.execute(stmt.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def stats(self) -> dict:
        by_type = await self.db.execute(
            select(ReportHistory.report_type, func.count(ReportHistory.id))
            .group_by(ReportHistory.report_type),
        )
        by_status = await self.db.execute(
            select(ReportHistory.status, func.count(ReportHistory.id))
            .group_by(ReportHistory.status),
        )
        total_bytes = await self.db.scalar(select(func.sum(ReportHistory.size_bytes)))
        type_counts = {t: c for t, c in by_type.all()}
        return {
            "total": sum(type_counts.values()),
            "by_type": type_counts,
            "by_status": {s: c for s, c in by_status.all()},
            "total_bytes": total_bytes or 0,
        }
