"""Shared Route Dependencies - acting user and report service wiring.

Invariants:
    - The acting user comes from the optional X-User header, default "system"
    - Blank or oversized header values fall back to the default
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from sis.config import Settings, get_settings
from sis.core.domain_types import DEFAULT_ACTOR
from sis.infrastructure.database import get_db
from sis.infrastructure.report_cache import ReportCache, get_report_cache
from sis.services.attendance_reports import AttendanceReportService

MAX_ACTOR_LENGTH = 64


def get_actor(x_user: str | None = Header(None)) -> str:
    if x_user is None:
        return DEFAULT_ACTOR
    actor = x_user.strip()
    if not actor or len(actor) > MAX_ACTOR_LENGTH:
        return DEFAULT_ACTOR
    return actor


def get_attendance_reports(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    cache: ReportCache = Depends(get_report_cache),
    actor: str = Depends(get_actor),
) -> AttendanceReportService:
    return AttendanceReportService(db, settings, cache, actor)
