"""ReEnrollment ORM - workflow record for a student returning after withdrawal.

Invariants:
    - re_enrollment_number unique, RNE-YYYY-NNNNNN
    - status transitions: DRAFT → PENDING_REVIEW → PENDING_APPROVAL → APPROVED → ENROLLED,
      with REJECTED / CANCELLED as terminal exits (CANCELLED never from ENROLLED)
    - months_away derived from previous_withdrawal_date and intended_enrollment_date

Design Decisions:
    - Counselor and principal decisions stored side by side: the principal decision
      requires the counselor's, and both stay visible for audit
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Text, Integer, Boolean, Date, DateTime, Numeric, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis.db.base import Base, TimestampMixin


class ReEnrollment(TimestampMixin, Base):
    __tablename__ = "re_enrollments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    re_enrollment_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False, index=True,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="DRAFT", index=True)

    # Previous enrollment
    previous_enrollment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    previous_withdrawal_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    previous_grade: Mapped[str | None] = mapped_column(String(30), nullable=True)
    withdrawal_reason: Mapped[str | None] = mapped_column(String(20), nullable=True)
    withdrawal_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    first_enrollment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_previous_enrollments: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Request
    requested_grade: Mapped[str] = mapped_column(String(30), nullable=False)
    intended_enrollment_date: Mapped[date] = mapped_column(Date, nullable=False)
    months_away: Mapped[int | None] = mapped_column(Integer, nullable=True)
    counselor_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("staff_users.id"), nullable=True, index=True,
    )

    # Records review
    transcript_reviewed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    immunizations_reviewed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    health_records_reviewed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    discipline_records_reviewed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    special_education_reviewed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    records_review_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    records_reviewed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Fees
    has_outstanding_fees: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    outstanding_fee_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    fees_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Decisions
    counselor_decision: Mapped[str | None] = mapped_column(String(20), nullable=True)
    counselor_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    counselor_decision_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    principal_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("staff_users.id"), nullable=True,
    )
    principal_decision: Mapped[str | None] = mapped_column(String(20), nullable=True)
    principal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    principal_decision_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    # Conditions
    conditional_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    conditions: Mapped[str | None] = mapped_column(Text, nullable=True)
    behavioral_contract_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    academic_plan_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    academic_plan_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    probation_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    probation_days: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Outcome
    approval_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_grade: Mapped[str | None] = mapped_column(String(30), nullable=True)
    homeroom: Mapped[str | None] = mapped_column(String(30), nullable=True)
    enrollment_completed_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Notes
    academic_interview_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    special_circumstances: Mapped[str | None] = mapped_column(Text, nullable=True)
    administrative_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_by_staff_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("staff_users.id"), nullable=True,
    )
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    student: Mapped["Student"] = relationship(
        "Student", foreign_keys=[student_id], lazy="joined",
    )
