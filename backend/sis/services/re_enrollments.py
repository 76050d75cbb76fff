"""Re-Enrollment Service - workflow for students returning after a withdrawal.

Invariants:
    - At most one pending (DRAFT..APPROVED) re-enrollment per student
    - DRAFT → PENDING_REVIEW happens when records are reviewed
    - Submission requires transcript, immunization and health reviews and no unpaid fees
    - Only the assigned counselor decides; the principal decides after the counselor
    - ENROLLED is final: it cannot be cancelled or rejected
    - Completion reactivates the student with the assigned grade
    - Every transition audited with the acting user

Design Decisions:
    - Workflow violations raise InvalidStateError (409), unknown body references 400
      (ADR: path id not found is 404, a bad reference in the payload is a bad request)
    - Cancellation keeps a "CANCELLED: reason" line in administrative_notes
      instead of a dedicated column
"""

import logging
from datetime import timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sis.core import enrollment_rules
from sis.core.dates import as_utc, utcnow
from sis.core.domain_types import (
    NEEDS_ATTENTION_DAYS, PENDING_RE_ENROLLMENT_STATUSES,
    AuditAction, EnrollmentDecision, ReEnrollmentStatus, WithdrawalReason,
)
from sis.core.errors import DuplicateResourceError, InvalidStateError, ResourceNotFoundError
from sis.models.re_enrollment import ReEnrollment
from sis.models.student import Student
from sis.schemas.re_enrollment import (
    CompletionRequest, ConditionalApprovalRequest, CounselorDecisionRequest,
    PrincipalDecisionRequest, ReEnrollmentCreate, ReEnrollmentUpdate, RecordsReview,
)
from sis.services.audit import AuditService
from sis.services.reference_data import get_student_or_404, require_staff, require_student

logger = logging.getLogger(__name__)

_PENDING = [s.value for s in PENDING_RE_ENROLLMENT_STATUSES]
_CLOSED = {
    ReEnrollmentStatus.ENROLLED.value,
    ReEnrollmentStatus.REJECTED.value,
    ReEnrollmentStatus.CANCELLED.value,
}


class ReEnrollmentService:
    """Re-enrollment records and their review/approval workflow."""

    def __init__(self, db: AsyncSession, actor: str):
        self.db = db
        self.actor = actor
        self.audit = AuditService(db)

    # ─── Lookups ────────────────────────────────────────────────

    async def get_or_404(self, re_enrollment_id: int) -> ReEnrollment:
        record = await self.db.get(ReEnrollment, re_enrollment_id)
        if not record:
            raise ResourceNotFoundError("ReEnrollment", re_enrollment_id)
        return record

    async def get_by_number(self, number: str) -> ReEnrollment:
        result = await self.db.execute(
            select(ReEnrollment).where(ReEnrollment.re_enrollment_number == number),
        )
        record = result.scalar_one_or_none()
        if not record:
            raise ResourceNotFoundError("ReEnrollment", number)
        return record

    async def _select(self, *criteria) -> list[ReEnrollment]:
        result = await self.db.execute(
            select(ReEnrollment).where(*criteria).order_by(ReEnrollment.id.desc()),
        )
        return list(result.unique().scalars().all())

    async def by_status(self, status: ReEnrollmentStatus) -> list[ReEnrollment]:
        return await self._select(ReEnrollment.status == status.value)

    async def pending_review(self) -> list[ReEnrollment]:
        return await self.by_status(ReEnrollmentStatus.PENDING_REVIEW)

    async def by_counselor(self, counselor_id: int) -> list[ReEnrollment]:
        return await self._select(ReEnrollment.counselor_id == counselor_id)

    async def unassigned(self) -> list[ReEnrollment]:
        return await self._select(
            ReEnrollment.counselor_id.is_(None), ReEnrollment.status.in_(_PENDING),
        )

    async def by_student(self, student_id: int) -> list[ReEnrollment]:
        await get_student_or_404(self.db, student_id)
        return await self._select(ReEnrollment.student_id == student_id)

    async def search_by_student_name(self, name: str) -> list[ReEnrollment]:
        pattern = f"%{name.strip().lower()}%"
        result = await self.db.execute(
            select(ReEnrollment)
            .join(Student, Student.id == ReEnrollment.student_id)
            .where(or_(
                func.lower(Student.first_name).like(pattern),
                func.lower(Student.last_name).like(pattern),
            ))
            .order_by(ReEnrollment.id.desc()),
        )
        return list(result.unique().scalars().all())

    # ─── Create / update / delete ───────────────────────────────

    async def _next_number(self) -> str:
        year = utcnow().year
        prefix = f"{enrollment_rules.RE_ENROLLMENT_PREFIX}-{year}-"
        last = await self.db.scalar(
            select(func.max(ReEnrollment.re_enrollment_number))
            .where(ReEnrollment.re_enrollment_number.like(f"{prefix}%")),
        )
        return enrollment_rules.format_number(
            enrollment_rules.RE_ENROLLMENT_PREFIX, year, enrollment_rules.next_sequence(last),
        )

    async def create(self, body: ReEnrollmentCreate) -> ReEnrollment:
        student = await require_student(self.db, body.student_id)
        if body.staff_id is not None:
            await require_staff(self.db, body.staff_id)

        pending = await self.db.execute(
            select(ReEnrollment.id)
            .where(ReEnrollment.student_id == body.student_id)
            .where(ReEnrollment.status.in_(_PENDING)),
        )
        if pending.first():
            raise DuplicateResourceError(
                "ReEnrollment", f"pending request for student {body.student_id}",
            )

        values = body.model_dump(exclude={"staff_id"})
        if values["withdrawal_reason"] is not None:
            values["withdrawal_reason"] = values["withdrawal_reason"].value
        record = ReEnrollment(
            **values,
            re_enrollment_number=await self._next_number(),
            status=ReEnrollmentStatus.DRAFT.value,
            months_away=enrollment_rules.months_between(
                body.previous_withdrawal_date, body.intended_enrollment_date,
            ),
            created_by_staff_id=body.staff_id,
            created_by=self.actor,
        )
        self.db.add(record)
        await self.db.flush()
        self.audit.log(
            AuditAction.CREATE, "ReEnrollment", record.id, self.actor,
            details={"number": record.re_enrollment_number, "student_id": student.id},
        )
        await self.db.commit()
        logger.info(
            f"Re-enrollment {record.re_enrollment_number} created for student {student.id}",
            extra={"entity_type": "ReEnrollment", "entity_id": record.id, "actor": self.actor},
        )
        return record

    async def update(self, re_enrollment_id: int, body: ReEnrollmentUpdate) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        if record.status in _CLOSED:
            raise InvalidStateError(f"Re-enrollment in status {record.status} cannot be edited")
        changes = body.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field in ("requested_grade", "intended_enrollment_date"):
                continue
            if isinstance(value, WithdrawalReason):
                value = value.value
            setattr(record, field, value)
        record.months_away = enrollment_rules.months_between(
            record.previous_withdrawal_date, record.intended_enrollment_date,
        )
        return await self._save(record, AuditAction.UPDATE, {"fields": sorted(changes)})

    async def delete(self, re_enrollment_id: int) -> None:
        record = await self.get_or_404(re_enrollment_id)
        if record.status != ReEnrollmentStatus.DRAFT.value:
            raise InvalidStateError("Only DRAFT re-enrollments can be deleted")
        await self.db.delete(record)
        self.audit.log(AuditAction.DELETE, "ReEnrollment", re_enrollment_id, self.actor)
        await self.db.commit()

    async def _save(
        self, record: ReEnrollment, action: AuditAction, details: dict | None = None,
    ) -> ReEnrollment:
        record.updated_by = self.actor
        self.audit.log(action, "ReEnrollment", record.id, self.actor, details=details)
        await self.db.commit()
        return record

    async def _transition(
        self, record: ReEnrollment, new_status: ReEnrollmentStatus, details: dict | None = None,
    ) -> ReEnrollment:
        old = record.status
        record.status = new_status.value
        logger.info(
            f"Re-enrollment {record.re_enrollment_number}: {old} → {new_status.value}",
            extra={"entity_type": "ReEnrollment", "entity_id": record.id, "actor": self.actor},
        )
        return await self._save(
            record, AuditAction.STATUS_CHANGE,
            {"from": old, "to": new_status.value, **(details or {})},
        )

    # ─── Review steps ───────────────────────────────────────────

    async def assign_counselor(self, re_enrollment_id: int, counselor_id: int) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        await require_staff(self.db, counselor_id, field="counselor_id")
        if record.status in _CLOSED:
            raise InvalidStateError(f"Re-enrollment in status {record.status} is closed")
        record.counselor_id = counselor_id
        return await self._save(record, AuditAction.UPDATE, {"counselor_id": counselor_id})

    async def review_records(self, re_enrollment_id: int, body: RecordsReview) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        reviewer = self.actor
        if body.reviewer_id is not None:
            staff = await require_staff(self.db, body.reviewer_id, field="reviewer_id")
            reviewer = staff.username
        if record.status not in (
            ReEnrollmentStatus.DRAFT.value, ReEnrollmentStatus.PENDING_REVIEW.value,
        ):
            raise InvalidStateError(
                f"Records cannot be reviewed in status {record.status}",
            )
        record.transcript_reviewed = body.transcript
        record.immunizations_reviewed = body.immunizations
        record.health_records_reviewed = body.health
        record.discipline_records_reviewed = body.discipline
        record.special_education_reviewed = body.special_education
        record.records_review_date = utcnow().date()
        record.records_reviewed_by = reviewer
        if record.status == ReEnrollmentStatus.DRAFT.value:
            return await self._transition(record, ReEnrollmentStatus.PENDING_REVIEW)
        return await self._save(record, AuditAction.UPDATE, {"records_reviewed": True})

    async def assess_fees(self, re_enrollment_id: int, amount) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        record.outstanding_fee_amount = amount
        record.has_outstanding_fees = amount > 0
        record.fees_paid = False
        return await self._save(record, AuditAction.UPDATE, {"fee_amount": str(amount)})

    async def mark_fees_paid(self, re_enrollment_id: int) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        record.fees_paid = True
        record.has_outstanding_fees = False
        return await self._save(record, AuditAction.UPDATE, {"fees_paid": True})

    async def submit(self, re_enrollment_id: int) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        if record.status not in (
            ReEnrollmentStatus.DRAFT.value, ReEnrollmentStatus.PENDING_REVIEW.value,
        ):
            raise InvalidStateError(f"Re-enrollment in status {record.status} cannot be submitted")
        missing = []
        if not record.transcript_reviewed:
            missing.append("transcript review")
        if not record.immunizations_reviewed:
            missing.append("immunization review")
        if not record.health_records_reviewed:
            missing.append("health records review")
        if record.has_outstanding_fees and not record.fees_paid:
            missing.append("payment of outstanding fees")
        if missing:
            raise InvalidStateError(
                f"Re-enrollment is not ready for approval: missing {', '.join(missing)}",
            )
        return await self._transition(record, ReEnrollmentStatus.PENDING_APPROVAL)

    # ─── Decisions ──────────────────────────────────────────────

    async def counselor_decision(
        self, re_enrollment_id: int, body: CounselorDecisionRequest,
    ) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        if record.counselor_id != body.counselor_id:
            raise InvalidStateError("Only the assigned counselor can record a decision")
        if record.status in _CLOSED:
            raise InvalidStateError(f"Re-enrollment in status {record.status} is closed")
        record.counselor_decision = body.decision.value
        record.counselor_notes = body.notes
        record.counselor_decision_date = utcnow()
        return await self._save(
            record, AuditAction.UPDATE, {"counselor_decision": body.decision.value},
        )

    async def principal_decision(
        self, re_enrollment_id: int, body: PrincipalDecisionRequest,
    ) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        await require_staff(self.db, body.principal_id, field="principal_id")
        if record.counselor_decision is None:
            raise InvalidStateError("Counselor decision is required before the principal decides")
        if record.status in _CLOSED:
            raise InvalidStateError(f"Re-enrollment in status {record.status} is closed")
        record.principal_id = body.principal_id
        record.principal_decision = body.decision.value
        record.principal_notes = body.notes
        record.principal_decision_date = utcnow()
        if body.decision == EnrollmentDecision.DENIED:
            record.rejection_reason = body.notes or "Denied by principal"
            return await self._transition(
                record, ReEnrollmentStatus.REJECTED, {"principal_decision": body.decision.value},
            )
        record.conditional_approval = body.decision == EnrollmentDecision.CONDITIONAL
        record.approval_date = utcnow().date()
        return await self._transition(
            record, ReEnrollmentStatus.APPROVED, {"principal_decision": body.decision.value},
        )

    async def set_conditions(
        self, re_enrollment_id: int, body: ConditionalApprovalRequest,
    ) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        if record.status in _CLOSED:
            raise InvalidStateError(f"Re-enrollment in status {record.status} is closed")
        record.conditional_approval = True
        record.conditions = body.conditions
        record.behavioral_contract_required = body.behavioral_contract
        record.academic_plan_required = body.academic_plan
        record.academic_plan_details = body.academic_plan_details
        record.probation_required = body.probation
        record.probation_days = body.probation_days if body.probation else None
        return await self._save(record, AuditAction.UPDATE, {"conditions": True})

    async def complete(self, re_enrollment_id: int, body: CompletionRequest) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        if record.status != ReEnrollmentStatus.APPROVED.value:
            raise InvalidStateError("Only APPROVED re-enrollments can be completed")
        record.assigned_grade = body.assigned_grade
        record.homeroom = body.homeroom
        record.enrollment_completed_date = utcnow().date()

        student = await get_student_or_404(self.db, record.student_id)
        student.active = True
        student.grade_level = body.assigned_grade
        self.audit.log(
            AuditAction.UPDATE, "Student", student.id, self.actor,
            details={"reactivated": True, "grade_level": body.assigned_grade},
        )
        return await self._transition(
            record, ReEnrollmentStatus.ENROLLED, {"assigned_grade": body.assigned_grade},
        )

    async def reject(self, re_enrollment_id: int, reason: str) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        if record.status in _CLOSED:
            raise InvalidStateError(f"Re-enrollment in status {record.status} cannot be rejected")
        record.rejection_reason = reason
        return await self._transition(record, ReEnrollmentStatus.REJECTED, {"reason": reason})

    async def cancel(self, re_enrollment_id: int, reason: str) -> ReEnrollment:
        record = await self.get_or_404(re_enrollment_id)
        if record.status in _CLOSED:
            raise InvalidStateError(f"Re-enrollment in status {record.status} cannot be cancelled")
        note = f"CANCELLED: {reason}"
        record.administrative_notes = (
            f"{record.administrative_notes}\n{note}" if record.administrative_notes else note
        )
        return await self._transition(record, ReEnrollmentStatus.CANCELLED, {"reason": reason})

    # ─── Reporting ──────────────────────────────────────────────

    async def statistics(self) -> dict:
        result = await self.db.execute(
            select(ReEnrollment.status, func.count(ReEnrollment.id))
            .group_by(ReEnrollment.status),
        )
        by_status = {s.value: 0 for s in ReEnrollmentStatus}
        by_status.update({status: count for status, count in result.all()})
        conditional = await self.db.scalar(
            select(func.count(ReEnrollment.id))
            .where(ReEnrollment.conditional_approval.is_(True)),
        )
        avg_months = await self.db.scalar(select(func.avg(ReEnrollment.months_away)))
        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "conditional_approvals": conditional or 0,
            "average_months_away": round(float(avg_months), 2) if avg_months is not None else 0.0,
        }

    async def counts_by_reason(self) -> dict[str, int]:
        result = await self.db.execute(
            select(ReEnrollment.withdrawal_reason, func.count(ReEnrollment.id))
            .where(ReEnrollment.withdrawal_reason.is_not(None))
            .group_by(ReEnrollment.withdrawal_reason),
        )
        return {reason: count for reason, count in result.all()}

    async def needing_attention(self) -> list[ReEnrollment]:
        cutoff = utcnow() - timedelta(days=NEEDS_ATTENTION_DAYS)
        pending = await self._select(ReEnrollment.status.in_(_PENDING))
        return [r for r in pending if as_utc(r.created_at) < cutoff]
