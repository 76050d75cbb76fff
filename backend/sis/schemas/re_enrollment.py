"""Re-Enrollment Schemas - request payloads for each workflow step and the full response.

Invariants:
    - Decisions constrained to EnrollmentDecision; reasons to WithdrawalReason
    - Fee amounts are non-negative Decimals
    - probation_days required (> 0) when probation is set
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sis.core.domain_types import EnrollmentDecision, ReEnrollmentStatus, WithdrawalReason


class ReEnrollmentDetails(BaseModel):
    previous_enrollment_date: date | None = None
    previous_withdrawal_date: date | None = None
    previous_grade: str | None = Field(None, max_length=30)
    withdrawal_reason: WithdrawalReason | None = None
    withdrawal_details: str | None = Field(None, max_length=2000)
    first_enrollment_date: date | None = None
    total_previous_enrollments: int = Field(0, ge=0)
    academic_interview_required: bool = False
    special_circumstances: str | None = Field(None, max_length=2000)


class ReEnrollmentCreate(ReEnrollmentDetails):
    student_id: int = Field(gt=0)
    requested_grade: str = Field(min_length=1, max_length=30)
    intended_enrollment_date: date
    staff_id: int | None = Field(None, gt=0)


class ReEnrollmentUpdate(BaseModel):
    requested_grade: str | None = Field(None, min_length=1, max_length=30)
    intended_enrollment_date: date | None = None
    previous_enrollment_date: date | None = None
    previous_withdrawal_date: date | None = None
    previous_grade: str | None = Field(None, max_length=30)
    withdrawal_reason: WithdrawalReason | None = None
    withdrawal_details: str | None = Field(None, max_length=2000)
    academic_interview_required: bool | None = None
    special_circumstances: str | None = Field(None, max_length=2000)
    administrative_notes: str | None = Field(None, max_length=5000)


class CounselorAssignment(BaseModel):
    counselor_id: int = Field(gt=0)


class RecordsReview(BaseModel):
    transcript: bool
    immunizations: bool
    health: bool
    discipline: bool = False
    special_education: bool = False
    reviewer_id: int | None = Field(None, gt=0)


class FeeAssessment(BaseModel):
    amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)


class CounselorDecisionRequest(BaseModel):
    counselor_id: int = Field(gt=0)
    decision: EnrollmentDecision
    notes: str | None = Field(None, max_length=2000)


class PrincipalDecisionRequest(BaseModel):
    principal_id: int = Field(gt=0)
    decision: EnrollmentDecision
    notes: str | None = Field(None, max_length=2000)


class ConditionalApprovalRequest(BaseModel):
    conditions: str = Field(min_length=1, max_length=2000)
    behavioral_contract: bool = False
    academic_plan: bool = False
    academic_plan_details: str | None = Field(None, max_length=2000)
    probation: bool = False
    probation_days: int | None = Field(None, gt=0, le=365)

    @model_validator(mode="after")
    def probation_needs_days(self):
        if self.probation and not self.probation_days:
            raise ValueError("probation requires probation_days")
        return self


class CompletionRequest(BaseModel):
    assigned_grade: str = Field(min_length=1, max_length=30)
    homeroom: str | None = Field(None, max_length=30)


class ReEnrollmentResponse(ReEnrollmentDetails):
    model_config = ConfigDict(from_attributes=True)

    id: int
    re_enrollment_number: str
    student_id: int
    status: ReEnrollmentStatus
    requested_grade: str
    intended_enrollment_date: date
    months_away: int | None
    counselor_id: int | None
    transcript_reviewed: bool
    immunizations_reviewed: bool
    health_records_reviewed: bool
    discipline_records_reviewed: bool
    special_education_reviewed: bool
    records_review_date: date | None
    records_reviewed_by: str | None
    has_outstanding_fees: bool
    outstanding_fee_amount: Decimal | None
    fees_paid: bool
    counselor_decision: EnrollmentDecision | None
    counselor_notes: str | None
    counselor_decision_date: datetime | None
    principal_id: int | None
    principal_decision: EnrollmentDecision | None
    principal_notes: str | None
    principal_decision_date: datetime | None
    conditional_approval: bool
    conditions: str | None
    behavioral_contract_required: bool
    academic_plan_required: bool
    academic_plan_details: str | None
    probation_required: bool
    probation_days: int | None
    approval_date: date | None
    rejection_reason: str | None
    assigned_grade: str | None
    homeroom: str | None
    enrollment_completed_date: date | None
    administrative_notes: str | None
    created_by: str | None
    updated_by: str | None
    created_at: datetime
    updated_at: datetime | None
