"""PreRegistration ORM - a returning student's registration for the next school year.

Invariants:
    - registration_number unique, PRE-YYYY-NNNNNN
    - at most one non-cancelled pre-registration per (student, target_school_year),
      enforced by the service
    - estimated_total_fees recomputed whenever a waiver flag changes
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Text, Integer, Boolean, Date, DateTime, Numeric, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column

from sis.db.base import Base, TimestampMixin


class PreRegistration(TimestampMixin, Base):
    __tablename__ = "pre_registrations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    registration_number: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True,
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False, index=True,
    )
    target_school_year: Mapped[str] = mapped_column(String(9), nullable=False, index=True)
    current_grade: Mapped[str | None] = mapped_column(String(30), nullable=True)
    next_grade: Mapped[str | None] = mapped_column(String(30), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="DRAFT")

    # Parent / guardian
    parent_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    parent_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    parent_email: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Address
    current_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    address_changed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    new_address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    emergency_contacts_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )

    # Academic interests
    interested_in_ap_honors: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    interested_in_dual_enrollment: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    interested_in_cte: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    interested_in_athletics: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    interested_in_fine_arts: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    interested_in_stem: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Special services
    continue_iep: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    continue_504: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    continue_esl: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    language_proficiency_level: Mapped[str | None] = mapped_column(String(30), nullable=True)
    continue_gifted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Transportation & medical
    needs_special_transportation: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    transportation_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    medical_accommodations: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Lunch & fees
    lunch_program_status: Mapped[str | None] = mapped_column(String(30), nullable=True)
    needs_lunch_application: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    technology_fee_waiver_requested: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    activity_fee_waiver_requested: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    estimated_total_fees: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0.00"),
    )

    # Scheduling
    preferred_start_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    study_hall_preference: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    lunch_period_preference: Mapped[str | None] = mapped_column(String(20), nullable=True)
    early_bird_interest: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    after_school_interest: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    scheduling_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Acknowledgments & signature
    acknowledged_accuracy: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    acknowledged_policies: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    parent_signature: Mapped[str | None] = mapped_column(String(200), nullable=True)
    signature_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Workflow
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by_staff_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("staff_users.id"), nullable=True,
    )
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
