"""Student Routes - registrar CRUD for the students every workflow references.

Invariants:
    - Duplicate student_number → 409 (DuplicateResourceError)
    - Unknown id → 404
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sis.api.dependencies import get_actor
from sis.infrastructure.database import get_db
from sis.schemas.reference import StudentCreate, StudentResponse
from sis.services.reference_data import ReferenceDataService, get_student_or_404

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    body: StudentCreate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return await ReferenceDataService(db, actor).create_student(body)


@router.get("", response_model=list[StudentResponse])
async def list_students(
    grade_level: str | None = Query(None, max_length=30),
    active: bool | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return await ReferenceDataService(db, actor).list_students(grade_level, active)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(student_id: int, db: AsyncSession = Depends(get_db)):
    return await get_student_or_404(db, student_id)
