"""Re-Enrollment Routes - returning-student workflow from request to enrollment.

Invariants:
    - Collection queries (/statistics, /by-reason, /search, ...) declared before /{re_enrollment_id}
    - Each workflow step is its own POST; the service enforces ordering (409 on violation)
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sis.api.dependencies import get_actor
from sis.core.domain_types import ReEnrollmentStatus
from sis.infrastructure.database import get_db
from sis.schemas.pre_registration import ReasonRequest
from sis.schemas.re_enrollment import (
    CompletionRequest, ConditionalApprovalRequest, CounselorAssignment,
    CounselorDecisionRequest, FeeAssessment, PrincipalDecisionRequest,
    ReEnrollmentCreate, ReEnrollmentResponse, ReEnrollmentUpdate, RecordsReview,
)
from sis.services.re_enrollments import ReEnrollmentService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/re-enrollments", tags=["re-enrollments"])


def get_re_enrollment_service(
    db: AsyncSession = Depends(get_db), actor: str = Depends(get_actor),
) -> ReEnrollmentService:
    return ReEnrollmentService(db, actor)


@router.post("", response_model=ReEnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def create_re_enrollment(
    body: ReEnrollmentCreate,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.create(body)


# ─── COLLECTION QUERIES ─────────────────────────────────────────

@router.get("", response_model=list[ReEnrollmentResponse])
async def list_by_status(
    status_filter: ReEnrollmentStatus = Query(ReEnrollmentStatus.DRAFT, alias="status"),
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.by_status(status_filter)


@router.get("/statistics")
async def re_enrollment_statistics(
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.statistics()


@router.get("/by-reason")
async def re_enrollments_by_reason(
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.counts_by_reason()


@router.get("/needing-attention", response_model=list[ReEnrollmentResponse])
async def re_enrollments_needing_attention(
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.needing_attention()


@router.get("/pending-review", response_model=list[ReEnrollmentResponse])
async def re_enrollments_pending_review(
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.pending_review()


@router.get("/unassigned", response_model=list[ReEnrollmentResponse])
async def unassigned_re_enrollments(
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.unassigned()


@router.get("/search", response_model=list[ReEnrollmentResponse])
async def search_re_enrollments(
    name: str = Query(min_length=1, max_length=100),
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.search_by_student_name(name)


@router.get("/counselor/{counselor_id}", response_model=list[ReEnrollmentResponse])
async def re_enrollments_by_counselor(
    counselor_id: int,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.by_counselor(counselor_id)


@router.get("/student/{student_id}", response_model=list[ReEnrollmentResponse])
async def re_enrollments_by_student(
    student_id: int,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.by_student(student_id)


@router.get("/number/{number}", response_model=ReEnrollmentResponse)
async def get_re_enrollment_by_number(
    number: str, service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.get_by_number(number)


# ─── SINGLE RECORD ──────────────────────────────────────────────

@router.get("/{re_enrollment_id}", response_model=ReEnrollmentResponse)
async def get_re_enrollment(
    re_enrollment_id: int,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.get_or_404(re_enrollment_id)


@router.put("/{re_enrollment_id}", response_model=ReEnrollmentResponse)
async def update_re_enrollment(
    re_enrollment_id: int,
    body: ReEnrollmentUpdate,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.update(re_enrollment_id, body)


@router.delete("/{re_enrollment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_re_enrollment(
    re_enrollment_id: int,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    await service.delete(re_enrollment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── WORKFLOW ───────────────────────────────────────────────────

@router.post("/{re_enrollment_id}/assign-counselor", response_model=ReEnrollmentResponse)
async def assign_counselor(
    re_enrollment_id: int,
    body: CounselorAssignment,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.assign_counselor(re_enrollment_id, body.counselor_id)


@router.post("/{re_enrollment_id}/review-records", response_model=ReEnrollmentResponse)
async def review_records(
    re_enrollment_id: int,
    body: RecordsReview,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.review_records(re_enrollment_id, body)


@router.post("/{re_enrollment_id}/fees", response_model=ReEnrollmentResponse)
async def assess_fees(
    re_enrollment_id: int,
    body: FeeAssessment,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.assess_fees(re_enrollment_id, body.amount)


@router.post("/{re_enrollment_id}/fees/paid", response_model=ReEnrollmentResponse)
async def mark_fees_paid(
    re_enrollment_id: int,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.mark_fees_paid(re_enrollment_id)


@router.post("/{re_enrollment_id}/submit", response_model=ReEnrollmentResponse)
async def submit_re_enrollment(
    re_enrollment_id: int,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.submit(re_enrollment_id)


@router.post("/{re_enrollment_id}/counselor-decision", response_model=ReEnrollmentResponse)
async def counselor_decision(
    re_enrollment_id: int,
    body: CounselorDecisionRequest,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.counselor_decision(re_enrollment_id, body)


@router.post("/{re_enrollment_id}/principal-decision", response_model=ReEnrollmentResponse)
async def principal_decision(
    re_enrollment_id: int,
    body: PrincipalDecisionRequest,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.principal_decision(re_enrollment_id, body)


@router.post("/{re_enrollment_id}/conditions", response_model=ReEnrollmentResponse)
async def set_conditions(
    re_enrollment_id: int,
    body: ConditionalApprovalRequest,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.set_conditions(re_enrollment_id, body)


@router.post("/{re_enrollment_id}/complete", response_model=ReEnrollmentResponse)
async def complete_re_enrollment(
    re_enrollment_id: int,
    body: CompletionRequest,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.complete(re_enrollment_id, body)


@router.post("/{re_enrollment_id}/reject", response_model=ReEnrollmentResponse)
async def reject_re_enrollment(
    re_enrollment_id: int,
    body: ReasonRequest,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.reject(re_enrollment_id, body.reason)


@router.post("/{re_enrollment_id}/cancel", response_model=ReEnrollmentResponse)
async def cancel_re_enrollment(
    re_enrollment_id: int,
    body: ReasonRequest,
    service: ReEnrollmentService = Depends(get_re_enrollment_service),
):
    return await service.cancel(re_enrollment_id, body.reason)
