"""Course Routes - courses that assignments belong to."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sis.api.dependencies import get_actor
from sis.infrastructure.database import get_db
from sis.schemas.reference import CourseCreate, CourseResponse
from sis.services.reference_data import ReferenceDataService

router = APIRouter(prefix="/api/v1/courses", tags=["courses"])


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CourseCreate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return await ReferenceDataService(db, actor).create_course(body)


@router.get("/{course_id}", response_model=CourseResponse)
async def get_course(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return await ReferenceDataService(db, actor).get_course_or_404(course_id)
