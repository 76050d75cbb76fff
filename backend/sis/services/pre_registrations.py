"""Pre-Registration Service - DRAFT → SUBMITTED → APPROVED/REJECTED workflow for returning students.

Invariants:
    - One non-cancelled pre-registration per (student, target school year)
    - Only DRAFT records can be edited or deleted
    - Submission requires the accuracy acknowledgment and a parent signature
    - next_grade and estimated_total_fees always reflect the current fields
    - Every state change audited with the acting user

Design Decisions:
    - Registration numbers continue from the highest number issued for the year
      (ADR: single-process deployment; zero-padded suffixes sort lexically)
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sis.core import enrollment_rules
from sis.core.dates import utcnow
from sis.core.domain_types import AuditAction, PreRegistrationStatus
from sis.core.errors import DuplicateResourceError, InvalidStateError, ResourceNotFoundError
from sis.models.pre_registration import PreRegistration
from sis.schemas.pre_registration import PreRegistrationCreate, PreRegistrationUpdate
from sis.services.audit import AuditService
from sis.services.reference_data import require_staff, require_student

logger = logging.getLogger(__name__)

_EDITABLE = {PreRegistrationStatus.DRAFT.value}


class PreRegistrationService:

    def __init__(self, db: AsyncSession, actor: str):
        self.db = db
        self.actor = actor
        self.audit = AuditService(db)

    async def get_or_404(self, registration_id: int) -> PreRegistration:
        registration = await self.db.get(PreRegistration, registration_id)
        if not registration:
            raise ResourceNotFoundError("PreRegistration", registration_id)
        return registration

    async def get_by_number(self, number: str) -> PreRegistration:
        result = await self.db.execute(
            select(PreRegistration).where(PreRegistration.registration_number == number),
        )
        registration = result.scalar_one_or_none()
        if not registration:
            raise ResourceNotFoundError("PreRegistration", number)
        return registration

    async def _next_number(self) -> str:
        year = utcnow().year
        prefix = f"{enrollment_rules.PRE_REGISTRATION_PREFIX}-{year}-"
        last = await self.db.scalar(
            select(func.max(PreRegistration.registration_number))
            .where(PreRegistration.registration_number.like(f"{prefix}%")),
        )
        return enrollment_rules.format_number(
            enrollment_rules.PRE_REGISTRATION_PREFIX, year, enrollment_rules.next_sequence(last),
        )

    @staticmethod
    def _recalculate(registration: PreRegistration) -> None:
        registration.next_grade = enrollment_rules.next_grade(registration.current_grade)
        registration.estimated_total_fees = enrollment_rules.estimate_fees(
            registration.technology_fee_waiver_requested,
            registration.activity_fee_waiver_requested,
        )

    async def create(self, body: PreRegistrationCreate) -> PreRegistration:
        student = await require_student(self.db, body.student_id)
        if body.staff_id is not None:
            await require_staff(self.db, body.staff_id)

        existing = await self.db.execute(
            select(PreRegistration.id)
            .where(PreRegistration.student_id == body.student_id)
            .where(PreRegistration.target_school_year == body.target_school_year)
            .where(PreRegistration.status != PreRegistrationStatus.CANCELLED.value),
        )
        if existing.first():
            raise DuplicateResourceError(
                "PreRegistration",
                f"student {body.student_id} for {body.target_school_year}",
            )

        registration = PreRegistration(
            **body.model_dump(exclude={"staff_id"}),
            registration_number=await self._next_number(),
            status=PreRegistrationStatus.DRAFT.value,
            current_grade=student.grade_level,
            created_by_staff_id=body.staff_id,
            created_by=self.actor,
        )
        self._recalculate(registration)
        self.db.add(registration)
        await self.db.flush()
        self.audit.log(
            AuditAction.CREATE, "PreRegistration", registration.id, self.actor,
            details={"number": registration.registration_number},
        )
        await self.db.commit()
        logger.info(
            f"Pre-registration {registration.registration_number} created "
            f"for student {student.id}",
            extra={"entity_type": "PreRegistration", "entity_id": registration.id},
        )
        return registration

    async def update(
        self, registration_id: int, body: PreRegistrationUpdate,
    ) -> PreRegistration:
        registration = await self.get_or_404(registration_id)
        if registration.status not in _EDITABLE:
            raise InvalidStateError(
                f"Pre-registration in status {registration.status} cannot be edited",
            )
        changes = body.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(registration, field, value)
        self._recalculate(registration)
        self.audit.log(
            AuditAction.UPDATE, "PreRegistration", registration_id, self.actor,
            details={"fields": sorted(changes)},
        )
        await self.db.commit()
        return registration

    async def _transition(
        self,
        registration: PreRegistration,
        new_status: PreRegistrationStatus,
        details: dict | None = None,
    ) -> PreRegistration:
        old = registration.status
        registration.status = new_status.value
        self.audit.log(
            AuditAction.STATUS_CHANGE, "PreRegistration", registration.id, self.actor,
            details={"from": old, "to": new_status.value, **(details or {})},
        )
        await self.db.commit()
        return registration

    async def submit(self, registration_id: int) -> PreRegistration:
        registration = await self.get_or_404(registration_id)
        if registration.status != PreRegistrationStatus.DRAFT.value:
            raise InvalidStateError("Only DRAFT pre-registrations can be submitted")
        missing = enrollment_rules.missing_submission_items(
            registration.acknowledged_accuracy, registration.parent_signature,
        )
        if missing:
            raise InvalidStateError(
                f"Pre-registration is incomplete: missing {', '.join(missing)}",
            )
        registration.submitted_at = utcnow()
        return await self._transition(registration, PreRegistrationStatus.SUBMITTED)

    async def approve(self, registration_id: int) -> PreRegistration:
        registration = await self.get_or_404(registration_id)
        if registration.status != PreRegistrationStatus.SUBMITTED.value:
            raise InvalidStateError("Only SUBMITTED pre-registrations can be approved")
        registration.reviewed_by = self.actor
        registration.reviewed_at = utcnow()
        return await self._transition(registration, PreRegistrationStatus.APPROVED)

    async def reject(self, registration_id: int, reason: str) -> PreRegistration:
        registration = await self.get_or_404(registration_id)
        if registration.status != PreRegistrationStatus.SUBMITTED.value:
            raise InvalidStateError("Only SUBMITTED pre-registrations can be rejected")
        registration.reviewed_by = self.actor
        registration.reviewed_at = utcnow()
        registration.rejection_reason = reason
        return await self._transition(
            registration, PreRegistrationStatus.REJECTED, {"reason": reason},
        )

    async def cancel(self, registration_id: int, reason: str) -> PreRegistration:
        registration = await self.get_or_404(registration_id)
        if registration.status in (
            PreRegistrationStatus.APPROVED.value, PreRegistrationStatus.CANCELLED.value,
        ):
            raise InvalidStateError(
                f"Pre-registration in status {registration.status} cannot be cancelled",
            )
        registration.cancellation_reason = reason
        return await self._transition(
            registration, PreRegistrationStatus.CANCELLED, {"reason": reason},
        )

    async def delete(self, registration_id: int) -> None:
        registration = await self.get_or_404(registration_id)
        if registration.status != PreRegistrationStatus.DRAFT.value:
            raise InvalidStateError("Only DRAFT pre-registrations can be deleted")
        await self.db.delete(registration)
        self.audit.log(AuditAction.DELETE, "PreRegistration", registration_id, self.actor)
        await self.db.commit()

    async def search(
        self,
        status: PreRegistrationStatus | None = None,
        school_year: str | None = None,
        student_id: int | None = None,
    ) -> list[PreRegistration]:
        stmt = select(PreRegistration).order_by(PreRegistration.id.desc())
        if status:
            stmt = stmt.where(PreRegistration.status == status.value)
        if school_year:
            stmt = stmt.where(PreRegistration.target_school_year == school_year)
        if student_id:
            stmt = stmt.where(PreRegistration.student_id == student_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def statistics(self, school_year: str | None = None) -> dict:
        stmt = select(PreRegistration.status, func.count(PreRegistration.id))
        if school_year:
            stmt = stmt.where(PreRegistration.target_school_year == school_year)
        result = await self.db.execute(stmt.group_by(PreRegistration.status))
        counts = {s.value: 0 for s in PreRegistrationStatus}
        counts.update({status: count for status, count in result.all()})
        return {
            "total": sum(counts.values()),
            "by_status": counts,
            "school_year": school_year,
        }
