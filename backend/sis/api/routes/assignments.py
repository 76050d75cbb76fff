"""Assignment Routes - assignments, grade entry and gradebook queries.

Invariants:
    - Static paths (/health, /grades/...) are declared before /{assignment_id}
    - Routes delegate to AssignmentService; no business logic here
    - Unknown path ids → 404, bad body references → 400, duplicate grade → 409

Design Decisions:
    - One router for assignments and grades: grades live under /assignments/grades
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sis.api.dependencies import get_actor
from sis.core.domain_types import GradeStatus
from sis.infrastructure.database import get_db
from sis.schemas.assignment import (
    AssignmentCreate, AssignmentResponse, AssignmentUpdate,
    ExcuseRequest, GradeEntry, GradeResponse, GradeUpdate,
)
from sis.services.assignments import AssignmentService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/assignments", tags=["assignments"])


def get_assignment_service(
    db: AsyncSession = Depends(get_db), actor: str = Depends(get_actor),
) -> AssignmentService:
    return AssignmentService(db, actor)


@router.get("/health")
async def assignments_health():
    return {"status": "UP", "service": "assignments"}


# ─── GRADES ─────────────────────────────────────────────────────

@router.post(
    "/grades/enter", response_model=GradeResponse, status_code=status.HTTP_201_CREATED,
)
async def enter_grade(
    body: GradeEntry, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.enter_grade(body)


@router.put("/grades/{grade_id}", response_model=GradeResponse)
async def update_grade(
    grade_id: int,
    body: GradeUpdate,
    service: AssignmentService = Depends(get_assignment_service),
):
    return await service.update_grade(grade_id, body)


@router.put("/grades/{grade_id}/mark-excused", response_model=GradeResponse)
async def mark_excused(
    grade_id: int,
    body: ExcuseRequest,
    service: AssignmentService = Depends(get_assignment_service),
):
    return await service.mark_excused(grade_id, body.reason)


@router.put("/grades/{grade_id}/mark-missing", response_model=GradeResponse)
async def mark_missing(
    grade_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.mark_missing(grade_id)


@router.get(
    "/grades/student/{student_id}/course/{course_id}",
    response_model=list[GradeResponse],
)
async def student_course_grades(
    student_id: int,
    course_id: int,
    service: AssignmentService = Depends(get_assignment_service),
):
    return await service.grades_for_student_in_course(student_id, course_id)


@router.get("/grades/student/{student_id}/course/{course_id}/missing")
async def student_missing_assignments(
    student_id: int,
    course_id: int,
    service: AssignmentService = Depends(get_assignment_service),
):
    grades = await service.grades_for_student_in_course(
        student_id, course_id, GradeStatus.MISSING,
    )
    assignments = [await service.get_or_404(g.assignment_id) for g in grades]
    return {
        "student_id": student_id,
        "course_id": course_id,
        "missing_count": len(assignments),
        "assignments": [AssignmentResponse.model_validate(a) for a in assignments],
    }


# ─── COURSE QUERIES ─────────────────────────────────────────────

@router.get("/course/{course_id}", response_model=list[AssignmentResponse])
async def course_assignments(
    course_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.list_for_course(course_id)


@router.get("/course/{course_id}/term/{term}", response_model=list[AssignmentResponse])
async def course_term_assignments(
    course_id: int,
    term: str,
    service: AssignmentService = Depends(get_assignment_service),
):
    return await service.list_for_course(course_id, term=term)


@router.get("/course/{course_id}/published", response_model=list[AssignmentResponse])
async def course_published_assignments(
    course_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.list_for_course(course_id, published_only=True)


@router.get("/course/{course_id}/upcoming", response_model=list[AssignmentResponse])
async def course_upcoming_assignments(
    course_id: int,
    days: int = Query(7, ge=1, le=365),
    service: AssignmentService = Depends(get_assignment_service),
):
    return await service.upcoming(course_id, days)


@router.get("/course/{course_id}/past-due", response_model=list[AssignmentResponse])
async def course_past_due_assignments(
    course_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.past_due(course_id)


@router.get("/course/{course_id}/count")
async def course_assignment_count(
    course_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.count_for_course(course_id)


# ─── ASSIGNMENTS ────────────────────────────────────────────────

@router.post("", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    body: AssignmentCreate, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.create(body)


@router.get("/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.view(assignment_id)


@router.put("/{assignment_id}", response_model=AssignmentResponse)
async def update_assignment(
    assignment_id: int,
    body: AssignmentUpdate,
    service: AssignmentService = Depends(get_assignment_service),
):
    return await service.update(assignment_id, body)


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    await service.delete(assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{assignment_id}/publish", response_model=AssignmentResponse)
async def publish_assignment(
    assignment_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.set_published(assignment_id, True)


@router.post("/{assignment_id}/unpublish", response_model=AssignmentResponse)
async def unpublish_assignment(
    assignment_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.set_published(assignment_id, False)


@router.get("/{assignment_id}/statistics")
async def assignment_statistics(
    assignment_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.statistics(assignment_id)


@router.get("/{assignment_id}/class-average")
async def assignment_class_average(
    assignment_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    return await service.class_average(assignment_id)


@router.get("/{assignment_id}/grades", response_model=list[GradeResponse])
async def assignment_grades(
    assignment_id: int, service: AssignmentService = Depends(get_assignment_service),
):
    await service.get_or_404(assignment_id)
    return await service.grades_for_assignment(assignment_id)
