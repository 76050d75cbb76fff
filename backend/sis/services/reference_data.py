"""Reference Data Service - students, staff, courses and attendance marks.

Invariants:
    - get_*_or_404 raise ResourceNotFoundError; require_* raise InvalidRequestError
      (a missing referenced id in a request body is a bad argument, not a missing resource)
    - Recording attendance for an existing (student, date) updates the mark in place
    - Every attendance write invalidates cached daily reports
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sis.core.domain_types import AuditAction
from sis.core.errors import (
    DuplicateResourceError, InvalidRequestError, ResourceNotFoundError,
)
from sis.infrastructure.report_cache import ReportCache
from sis.models.attendance_record import AttendanceRecord
from sis.models.course import Course
from sis.models.staff_user import StaffUser
from sis.models.student import Student
from sis.schemas.reference import AttendanceMark, CourseCreate, StaffCreate, StudentCreate
from sis.services.audit import AuditService

logger = logging.getLogger(__name__)


async def get_student_or_404(db: AsyncSession, student_id: int) -> Student:
    student = await db.get(Student, student_id)
    if not student:
        raise ResourceNotFoundError("Student", student_id)
    return student


async def require_student(db: AsyncSession, student_id: int) -> Student:
    student = await db.get(Student, student_id)
    if not student:
        raise InvalidRequestError(f"Student not found: {student_id}", field="student_id")
    return student


async def require_staff(
    db: AsyncSession, staff_id: int, field: str = "staff_id",
) -> StaffUser:
    staff = await db.get(StaffUser, staff_id)
    if not staff:
        raise InvalidRequestError(f"Staff user not found: {staff_id}", field=field)
    return staff


class ReferenceDataService:
    """CRUD for the entities every workflow references."""

    def __init__(self, db: AsyncSession, actor: str):
        self.db = db
        self.actor = actor
        self.audit = AuditService(db)

    async def create_student(self, body: StudentCreate) -> Student:
        existing = await self.db.execute(
            select(Student).where(Student.student_number == body.student_number),
        )
        if existing.scalar_one_or_none():
            raise DuplicateResourceError("Student", body.student_number)
        student = Student(**body.model_dump())
        self.db.add(student)
        await self.db.flush()
        self.audit.log(AuditAction.CREATE, "Student", student.id, self.actor)
        await self.db.commit()
        return student

    async def list_students(
        self, grade_level: str | None = None, active: bool | None = None,
    ) -> list[Student]:
        stmt = select(Student).order_by(Student.last_name, Student.first_name)
        if grade_level:
            stmt = stmt.where(Student.grade_level == grade_level)
        if active is not None:
            stmt = stmt.where(Student.active.is_(active))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_staff(self, body: StaffCreate) -> StaffUser:
        existing = await self.db.execute(
            select(StaffUser).where(StaffUser.username == body.username),
        )
        if existing.scalar_one_or_none():
            raise DuplicateResourceError("StaffUser", body.username)
        staff = StaffUser(
            username=body.username, full_name=body.full_name, role=body.role.value,
        )
        self.db.add(staff)
        await self.db.flush()
        self.audit.log(AuditAction.CREATE, "StaffUser", staff.id, self.actor)
        await self.db.commit()
        return staff

    async def list_staff(self, role: str | None = None) -> list[StaffUser]:
        stmt = select(StaffUser).order_by(StaffUser.full_name)
        if role:
            stmt = stmt.where(StaffUser.role == role)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_staff_or_404(self, staff_id: int) -> StaffUser:
        staff = await self.db.get(StaffUser, staff_id)
        if not staff:
            raise ResourceNotFoundError("StaffUser", staff_id)
        return staff

    async def create_course(self, body: CourseCreate) -> Course:
        course = Course(**body.model_dump())
        self.db.add(course)
        await self.db.flush()
        self.audit.log(AuditAction.CREATE, "Course", course.id, self.actor)
        await self.db.commit()
        return course

    async def get_course_or_404(self, course_id: int) -> Course:
        course = await self.db.get(Course, course_id)
        if not course:
            raise ResourceNotFoundError("Course", course_id)
        return course

    async def record_attendance(
        self, body: AttendanceMark, cache: ReportCache,
    ) -> AttendanceRecord:
        await require_student(self.db, body.student_id)
        result = await self.db.execute(
            select(AttendanceRecord)
            .where(AttendanceRecord.student_id == body.student_id)
            .where(AttendanceRecord.attendance_date == body.attendance_date),
        )
        record = result.scalar_one_or_none()
        action = AuditAction.UPDATE if record else AuditAction.CREATE
        if record is None:
            record = AttendanceRecord(
                student_id=body.student_id, attendance_date=body.attendance_date,
            )
            self.db.add(record)
        record.status = body.status.value
        record.notes = body.notes
        record.recorded_by = self.actor
        await self.db.flush()
        self.audit.log(
            action, "AttendanceRecord", record.id, self.actor,
            details={"date": body.attendance_date.isoformat(), "status": body.status.value},
        )
        await self.db.commit()
        cache.invalidate_prefix("daily:")
        return record

    async def list_attendance(
        self, attendance_date: date | None = None, student_id: int | None = None,
    ) -> list[AttendanceRecord]:
        stmt = select(AttendanceRecord).order_by(
            AttendanceRecord.attendance_date, AttendanceRecord.student_id,
        )
        if attendance_date:
            stmt = stmt.where(AttendanceRecord.attendance_date == attendance_date)
        if student_id:
            stmt = stmt.where(AttendanceRecord.student_id == student_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
