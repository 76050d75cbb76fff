"""Pre-Registration Schemas - returning-student registration for the next school year.

Invariants:
    - target_school_year formatted YYYY-YYYY with consecutive years
    - Detail fields shared by create and update through PreRegistrationDetails
    - Update is partial: exclude_unset decides what changes
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sis.core.domain_types import PreRegistrationStatus


class PreRegistrationDetails(BaseModel):
    # Parent / guardian
    parent_name: str | None = Field(None, max_length=200)
    parent_phone: str | None = Field(None, max_length=30)
    parent_email: str | None = Field(None, max_length=200)

    # Address
    current_address: str | None = Field(None, max_length=500)
    address_changed: bool = False
    new_address: str | None = Field(None, max_length=500)
    emergency_contacts_verified: bool = False

    # Academic interests
    interested_in_ap_honors: bool = False
    interested_in_dual_enrollment: bool = False
    interested_in_cte: bool = False
    interested_in_athletics: bool = False
    interested_in_fine_arts: bool = False
    interested_in_stem: bool = False

    # Special services
    continue_iep: bool = False
    continue_504: bool = False
    continue_esl: bool = False
    language_proficiency_level: str | None = Field(None, max_length=30)
    continue_gifted: bool = False

    # Transportation & medical
    needs_special_transportation: bool = False
    transportation_type: str | None = Field(None, max_length=50)
    medical_accommodations: str | None = Field(None, max_length=2000)

    # Lunch & fees
    lunch_program_status: str | None = Field(None, max_length=30)
    needs_lunch_application: bool = False
    technology_fee_waiver_requested: bool = False
    activity_fee_waiver_requested: bool = False

    # Scheduling
    preferred_start_time: str | None = Field(None, max_length=20)
    study_hall_preference: bool = False
    lunch_period_preference: str | None = Field(None, max_length=20)
    early_bird_interest: bool = False
    after_school_interest: bool = False
    scheduling_notes: str | None = Field(None, max_length=2000)

    # Acknowledgments & signature
    acknowledged_accuracy: bool = False
    acknowledged_policies: bool = False
    parent_signature: str | None = Field(None, max_length=200)
    signature_date: date | None = None


class PreRegistrationCreate(PreRegistrationDetails):
    student_id: int = Field(gt=0)
    target_school_year: str = Field(pattern=r"^\d{4}-\d{4}$")
    staff_id: int | None = Field(None, gt=0)

    @field_validator("target_school_year")
    @classmethod
    def consecutive_years(cls, v: str) -> str:
        start, end = (int(p) for p in v.split("-"))
        if end != start + 1:
            raise ValueError("school year must span consecutive years, e.g. 2026-2027")
        return v


class PreRegistrationUpdate(PreRegistrationDetails):
    pass


class ReasonRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=2000)


class PreRegistrationResponse(PreRegistrationDetails):
    model_config = ConfigDict(from_attributes=True)

    id: int
    registration_number: str
    student_id: int
    target_school_year: str
    current_grade: str | None
    next_grade: str | None
    status: PreRegistrationStatus
    estimated_total_fees: Decimal
    submitted_at: datetime | None
    reviewed_by: str | None
    reviewed_at: datetime | None
    rejection_reason: str | None
    cancellation_reason: str | None
    created_by: str | None
    created_at: datetime
    updated_at: datetime | None
