"""Staff Routes - teachers, counselors, principals and registrars."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sis.api.dependencies import get_actor
from sis.core.domain_types import StaffRole
from sis.infrastructure.database import get_db
from sis.schemas.reference import StaffCreate, StaffResponse
from sis.services.reference_data import ReferenceDataService

router = APIRouter(prefix="/api/v1/staff", tags=["staff"])


@router.post("", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
async def create_staff(
    body: StaffCreate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return await ReferenceDataService(db, actor).create_staff(body)


@router.get("", response_model=list[StaffResponse])
async def list_staff(
    role: StaffRole | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return await ReferenceDataService(db, actor).list_staff(role.value if role else None)


@router.get("/{staff_id}", response_model=StaffResponse)
async def get_staff(
    staff_id: int,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return await ReferenceDataService(db, actor).get_staff_or_404(staff_id)
