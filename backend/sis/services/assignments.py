"""Assignment Service - assignment lifecycle, grade entry and gradebook queries.

Invariants:
    - Unknown assignment/grade ids in the path → ResourceNotFoundError (404)
    - Unknown course/student/assignment ids in a body → InvalidRequestError (400)
    - A score must lie within 0..max_points; one grade per (assignment, student)
    - Create / update / delete / view are audited in the same transaction

Design Decisions:
    - Grade statistics computed by core/grade_math from plain dicts (no ORM in core)
    - Deleting an assignment deletes its grades explicitly: SQLite ignores FK cascades
      unless PRAGMA foreign_keys is on, so the service does not rely on them
"""

import logging
from datetime import timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sis.core import grade_math
from sis.core.dates import utcnow
from sis.core.domain_types import AuditAction, GradeStatus
from sis.core.errors import (
    DuplicateResourceError, InvalidRequestError, ResourceNotFoundError,
)
from sis.models.assignment import Assignment
from sis.models.assignment_grade import AssignmentGrade
from sis.models.course import Course
from sis.schemas.assignment import (
    AssignmentCreate, AssignmentUpdate, GradeEntry, GradeUpdate,
)
from sis.services.audit import AuditService
from sis.services.reference_data import require_student

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = {"title", "max_points", "weight"}


def _grade_dicts(grades: list[AssignmentGrade]) -> list[dict]:
    return [{"status": g.status, "score": g.score} for g in grades]


class AssignmentService:
    """Assignments and their grades."""

    def __init__(self, db: AsyncSession, actor: str):
        self.db = db
        self.actor = actor
        self.audit = AuditService(db)

    # ─── Assignments ────────────────────────────────────────────

    async def get_or_404(self, assignment_id: int) -> Assignment:
        assignment = await self.db.get(Assignment, assignment_id)
        if not assignment:
            raise ResourceNotFoundError("Assignment", assignment_id)
        return assignment

    async def view(self, assignment_id: int) -> Assignment:
        assignment = await self.get_or_404(assignment_id)
        self.audit.log(AuditAction.VIEW, "Assignment", assignment_id, self.actor)
        await self.db.commit()
        return assignment

    async def create(self, body: AssignmentCreate) -> Assignment:
        if not await self.db.get(Course, body.course_id):
            raise InvalidRequestError(f"Course not found: {body.course_id}", field="course_id")
        assignment = Assignment(**body.model_dump(), created_by=self.actor)
        self.db.add(assignment)
        await self.db.flush()
        self.audit.log(
            AuditAction.CREATE, "Assignment", assignment.id, self.actor,
            details={"course_id": body.course_id, "title": body.title},
        )
        await self.db.commit()
        logger.info(
            f"Assignment {assignment.id} created for course {body.course_id}",
            extra={"entity_type": "Assignment", "entity_id": assignment.id, "actor": self.actor},
        )
        return assignment

    async def update(self, assignment_id: int, body: AssignmentUpdate) -> Assignment:
        assignment = await self.get_or_404(assignment_id)
        changes = body.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field in _REQUIRED_FIELDS:
                continue
            setattr(assignment, field, value)
        self.audit.log(
            AuditAction.UPDATE, "Assignment", assignment_id, self.actor,
            details={"fields": sorted(changes)},
        )
        await self.db.commit()
        return assignment

    async def delete(self, assignment_id: int) -> None:
        assignment = await self.get_or_404(assignment_id)
        await self.db.execute(
            delete(AssignmentGrade).where(AssignmentGrade.assignment_id == assignment_id),
        )
        await self.db.delete(assignment)
        self.audit.log(
            AuditAction.DELETE, "Assignment", assignment_id, self.actor,
            details={"title": assignment.title},
        )
        await self.db.commit()
        logger.info(f"Assignment {assignment_id} deleted", extra={"actor": self.actor})

    async def set_published(self, assignment_id: int, published: bool) -> Assignment:
        assignment = await self.get_or_404(assignment_id)
        assignment.published = published
        self.audit.log(
            AuditAction.STATUS_CHANGE, "Assignment", assignment_id, self.actor,
            details={"published": published},
        )
        await self.db.commit()
        return assignment

    async def list_for_course(
        self,
        course_id: int,
        term: str | None = None,
        published_only: bool = False,
    ) -> list[Assignment]:
        stmt = (
            select(Assignment)
            .where(Assignment.course_id == course_id)
            .order_by(Assignment.due_date.is_(None), Assignment.due_date, Assignment.id)
        )
        if term:
            stmt = stmt.where(Assignment.term == term)
        if published_only:
            stmt = stmt.where(Assignment.published.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def upcoming(self, course_id: int, days: int) -> list[Assignment]:
        now = utcnow()
        result = await self.db.execute(
            select(Assignment)
            .where(Assignment.course_id == course_id)
            .where(Assignment.published.is_(True))
            .where(Assignment.due_date >= now)
            .where(Assignment.due_date <= now + timedelta(days=days))
            .order_by(Assignment.due_date),
        )
        return list(result.scalars().all())

    async def past_due(self, course_id: int) -> list[Assignment]:
        result = await self.db.execute(
            select(Assignment)
            .where(Assignment.course_id == course_id)
            .where(Assignment.published.is_(True))
            .where(Assignment.due_date < utcnow())
            .order_by(Assignment.due_date.desc()),
        )
        return list(result.scalars().all())

    async def count_for_course(self, course_id: int) -> dict:
        total = await self.db.scalar(
            select(func.count(Assignment.id)).where(Assignment.course_id == course_id),
        )
        graded = await self.db.scalar(
            select(func.count(func.distinct(AssignmentGrade.assignment_id)))
            .join(Assignment, Assignment.id == AssignmentGrade.assignment_id)
            .where(Assignment.course_id == course_id)
            .where(AssignmentGrade.status == GradeStatus.GRADED.value),
        )
        total = total or 0
        graded = graded or 0
        return {"total": total, "graded": graded, "ungraded": total - graded}

    async def statistics(self, assignment_id: int) -> dict:
        assignment = await self.get_or_404(assignment_id)
        grades = await self.grades_for_assignment(assignment_id)
        return {
            "assignment_id": assignment_id,
            "max_points": assignment.max_points,
            **grade_math.compute_assignment_statistics(
                _grade_dicts(grades), assignment.max_points,
            ),
        }

    async def class_average(self, assignment_id: int) -> dict:
        await self.get_or_404(assignment_id)
        grades = await self.grades_for_assignment(assignment_id)
        average = grade_math.class_average(_grade_dicts(grades))
        return {
            "assignment_id": assignment_id,
            "class_average": average if average is not None else 0.0,
            "has_grades": average is not None,
        }

    # ─── Grades ─────────────────────────────────────────────────

    async def get_grade_or_404(self, grade_id: int) -> AssignmentGrade:
        grade = await self.db.get(AssignmentGrade, grade_id)
        if not grade:
            raise ResourceNotFoundError("AssignmentGrade", grade_id)
        return grade

    def _apply_score(self, grade: AssignmentGrade, score: float, max_points: float) -> None:
        if not grade_math.score_in_range(score, max_points):
            raise InvalidRequestError(
                f"Score {score} must be between 0 and {max_points}", field="score",
            )
        pct = grade_math.percentage(score, max_points)
        grade.score = score
        grade.percentage = pct
        grade.letter_grade = grade_math.letter_grade(pct)
        grade.status = GradeStatus.GRADED.value
        grade.excused_reason = None
        grade.graded_at = utcnow()
        grade.graded_by = self.actor

    async def enter_grade(self, body: GradeEntry) -> AssignmentGrade:
        await require_student(self.db, body.student_id)
        assignment = await self.db.get(Assignment, body.assignment_id)
        if not assignment:
            raise InvalidRequestError(
                f"Assignment not found: {body.assignment_id}", field="assignment_id",
            )
        existing = await self.db.execute(
            select(AssignmentGrade)
            .where(AssignmentGrade.assignment_id == body.assignment_id)
            .where(AssignmentGrade.student_id == body.student_id),
        )
        if existing.scalar_one_or_none():
            raise DuplicateResourceError(
                "AssignmentGrade",
                f"student {body.student_id} on assignment {body.assignment_id}",
            )
        grade = AssignmentGrade(
            assignment_id=body.assignment_id,
            student_id=body.student_id,
            comments=body.comments,
        )
        self._apply_score(grade, body.score, assignment.max_points)
        self.db.add(grade)
        await self.db.flush()
        self.audit.log(
            AuditAction.CREATE, "AssignmentGrade", grade.id, self.actor,
            details={"assignment_id": body.assignment_id, "student_id": body.student_id},
        )
        await self.db.commit()
        return grade

    async def update_grade(self, grade_id: int, body: GradeUpdate) -> AssignmentGrade:
        grade = await self.get_grade_or_404(grade_id)
        if body.score is not None:
            assignment = await self.get_or_404(grade.assignment_id)
            self._apply_score(grade, body.score, assignment.max_points)
        if "comments" in body.model_fields_set:
            grade.comments = body.comments
        self.audit.log(AuditAction.UPDATE, "AssignmentGrade", grade_id, self.actor)
        await self.db.commit()
        return grade

    async def mark_excused(self, grade_id: int, reason: str) -> AssignmentGrade:
        grade = await self.get_grade_or_404(grade_id)
        grade.status = GradeStatus.EXCUSED.value
        grade.excused_reason = reason
        grade.score = None
        grade.percentage = None
        grade.letter_grade = None
        self.audit.log(
            AuditAction.STATUS_CHANGE, "AssignmentGrade", grade_id, self.actor,
            details={"status": GradeStatus.EXCUSED.value, "reason": reason},
        )
        await self.db.commit()
        return grade

    async def mark_missing(self, grade_id: int) -> AssignmentGrade:
        grade = await self.get_grade_or_404(grade_id)
        grade.status = GradeStatus.MISSING.value
        grade.score = None
        grade.percentage = None
        grade.letter_grade = None
        grade.excused_reason = None
        self.audit.log(
            AuditAction.STATUS_CHANGE, "AssignmentGrade", grade_id, self.actor,
            details={"status": GradeStatus.MISSING.value},
        )
        await self.db.commit()
        return grade

    async def grades_for_assignment(self, assignment_id: int) -> list[AssignmentGrade]:
        result = await self.db.execute(
            select(AssignmentGrade)
            .where(AssignmentGrade.assignment_id == assignment_id)
            .order_by(AssignmentGrade.student_id),
        )
        return list(result.scalars().all())

    async def grades_for_student_in_course(
        self, student_id: int, course_id: int, status: GradeStatus | None = None,
    ) -> list[AssignmentGrade]:
        stmt = (
            select(AssignmentGrade)
            .join(Assignment, Assignment.id == AssignmentGrade.assignment_id)
            .where(AssignmentGrade.student_id == student_id)
            .where(Assignment.course_id == course_id)
            .order_by(Assignment.due_date.is_(None), Assignment.due_date, Assignment.id)
        )
        if status:
            stmt = stmt.where(AssignmentGrade.status == status.value)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
