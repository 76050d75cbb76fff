"""Attendance Routes - daily attendance marks feeding the attendance reports.

Invariants:
    - One record per (student, date): re-posting updates it and returns 200
    - Every write invalidates cached daily reports
"""

from datetime import date

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sis.api.dependencies import get_actor
from sis.infrastructure.database import get_db
from sis.infrastructure.report_cache import ReportCache, get_report_cache
from sis.schemas.reference import AttendanceMark, AttendanceRecordResponse
from sis.services.reference_data import ReferenceDataService

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


@router.post("", response_model=AttendanceRecordResponse, status_code=status.HTTP_201_CREATED)
async def record_attendance(
    body: AttendanceMark,
    response: Response,
    db: AsyncSession = Depends(get_db),
    cache: ReportCache = Depends(get_report_cache),
    actor: str = Depends(get_actor),
):
    service = ReferenceDataService(db, actor)
    existing = await service.list_attendance(body.attendance_date, body.student_id)
    record = await service.record_attendance(body, cache)
    if existing:
        response.status_code = status.HTTP_200_OK
    return record


@router.get("", response_model=list[AttendanceRecordResponse])
async def list_attendance(
    attendance_date: date | None = None,
    student_id: int | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return await ReferenceDataService(db, actor).list_attendance(attendance_date, student_id)
