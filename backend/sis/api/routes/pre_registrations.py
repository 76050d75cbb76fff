"""Pre-Registration Routes - returning-student registration for the next school year.

Invariants:
    - /statistics and /number/{number} declared before /{registration_id}
    - Workflow violations surface as 409 from the service
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sis.api.dependencies import get_actor
from sis.core.domain_types import PreRegistrationStatus
from sis.infrastructure.database import get_db
from sis.schemas.pre_registration import (
    PreRegistrationCreate, PreRegistrationResponse, PreRegistrationUpdate, ReasonRequest,
)
from sis.services.pre_registrations import PreRegistrationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/pre-registrations", tags=["pre-registrations"])


def get_pre_registration_service(
    db: AsyncSession = Depends(get_db), actor: str = Depends(get_actor),
) -> PreRegistrationService:
    return PreRegistrationService(db, actor)


@router.post("", response_model=PreRegistrationResponse, status_code=status.HTTP_201_CREATED)
async def create_pre_registration(
    body: PreRegistrationCreate,
    service: PreRegistrationService = Depends(get_pre_registration_service),
):
    return await service.create(body)


@router.get("", response_model=list[PreRegistrationResponse])
async def search_pre_registrations(
    status_filter: PreRegistrationStatus | None = Query(None, alias="status"),
    school_year: str | None = Query(None, pattern=r"^\d{4}-\d{4}$"),
    student_id: int | None = None,
    service: PreRegistrationService = Depends(get_pre_registration_service),
):
    return await service.search(status_filter, school_year, student_id)


@router.get("/statistics")
async def pre_registration_statistics(
    school_year: str | None = Query(None, pattern=r"^\d{4}-\d{4}$"),
    service: PreRegistrationService = Depends(get_pre_registration_service),
):
    return await service.statistics(school_year)


@router.get("/number/{number}", response_model=PreRegistrationResponse)
async def get_pre_registration_by_number(
    number: str, service: PreRegistrationService = Depends(get_pre_registration_service),
):
    return await service.get_by_number(number)


@router.get("/{registration_id}", response_model=PreRegistrationResponse)
async def get_pre_registration(
    registration_id: int,
    service: PreRegistrationService = Depends(get_pre_registration_service),
):
    return await service.get_or_404(registration_id)


@router.put("/{registration_id}", response_model=PreRegistrationResponse)
async def update_pre_registration(
    registration_id: int,
    body: PreRegistrationUpdate,
    service: PreRegistrationService = Depends(get_pre_registration_service),
):
    return await service.update(registration_id, body)


@router.delete("/{registration_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pre_registration(
    registration_id: int,
    service: PreRegistrationService = Depends(get_pre_registration_service),
):
    await service.delete(registration_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── WORKFLOW ───────────────────────────────────────────────────

@router.post("/{registration_id}/submit", response_model=PreRegistrationResponse)
async def submit_pre_registration(
    registration_id: int,
    service: PreRegistrationService = Depends(get_pre_registration_service),
):
    return await service.submit(registration_id)


@router.post("/{registration_id}/approve", response_model=PreRegistrationResponse)
async def approve_pre_registration(
    registration_id: int,
    service: PreRegistrationService = Depends(get_pre_registration_service),
):
    return await service.approve(registration_id)


@router.post("/{registration_id}/reject", response_model=PreRegistrationResponse)
async def reject_pre_registration(
    registration_id: int,
    body: ReasonRequest,
    service: PreRegistrationService = Depends(get_pre_registration_service),
):
    return await service.reject(registration_id, body.reason)


@router.post("/{registration_id}/cancel", response_model=PreRegistrationResponse)
async def cancel_pre_registration(
    registration_id: int,
    body: ReasonRequest,
    service: PreRegistrationService = Depends(get_pre_registration_service),
):
    return await service.cancel(registration_id, body.reason)
