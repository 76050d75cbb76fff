"""Assignment Schemas - assignment CRUD and grade entry payloads.

Invariants:
    - title: 1-200 chars, stripped, non-empty on both create and update
    - max_points > 0; scores ≥ 0 (upper bound checked against the assignment in the service)
    - AssignmentUpdate is partial: only provided fields change
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sis.core.domain_types import GradeStatus


def _strip_title(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if not v:
        raise ValueError("title cannot be empty or whitespace")
    return v


def _to_utc(v: datetime | None) -> datetime | None:
    if v is None:
        return None
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


class AssignmentCreate(BaseModel):
    course_id: int = Field(gt=0)
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=10_000)
    category: str | None = Field(None, max_length=50)
    max_points: float = Field(100.0, gt=0)
    weight: float = Field(1.0, ge=0)
    term: str | None = Field(None, max_length=30)
    due_date: datetime | None = None
    published: bool = False

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return _strip_title(v)

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)


class AssignmentUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=10_000)
    category: str | None = Field(None, max_length=50)
    max_points: float | None = Field(None, gt=0)
    weight: float | None = Field(None, ge=0)
    term: str | None = Field(None, max_length=30)
    due_date: datetime | None = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return _strip_title(v)

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    title: str
    description: str | None
    category: str | None
    max_points: float
    weight: float
    term: str | None
    due_date: datetime | None
    published: bool
    created_by: str | None
    created_at: datetime
    updated_at: datetime | None


class GradeEntry(BaseModel):
    student_id: int = Field(gt=0)
    assignment_id: int = Field(gt=0)
    score: float = Field(ge=0)
    comments: str | None = Field(None, max_length=2000)


class GradeUpdate(BaseModel):
    score: float | None = Field(None, ge=0)
    comments: str | None = Field(None, max_length=2000)


class ExcuseRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=1000)


class GradeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    assignment_id: int
    student_id: int
    score: float | None
    percentage: float | None
    letter_grade: str | None
    status: GradeStatus
    comments: str | None
    excused_reason: str | None
    graded_at: datetime | None
    graded_by: str | None
