"""Reference Data Schemas - students, staff, courses and attendance marks.

Invariants:
    - Names and numbers are stripped; blank values rejected
    - Responses built from ORM objects (from_attributes)
"""

from datetime import date, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from sis.core.domain_types import AttendanceStatus, StaffRole


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("value cannot be empty or whitespace")
    return v


RequiredText = Annotated[str, AfterValidator(_strip_required)]


class StudentCreate(BaseModel):
    student_number: RequiredText = Field(min_length=1, max_length=32)
    first_name: RequiredText = Field(min_length=1, max_length=100)
    last_name: RequiredText = Field(min_length=1, max_length=100)
    grade_level: RequiredText = Field(min_length=1, max_length=30)
    active: bool = True


class StudentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_number: str
    first_name: str
    last_name: str
    grade_level: str
    active: bool


class StaffCreate(BaseModel):
    username: RequiredText = Field(min_length=1, max_length=64)
    full_name: RequiredText = Field(min_length=1, max_length=200)
    role: StaffRole


class StaffResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str
    role: StaffRole
    active: bool


class CourseCreate(BaseModel):
    code: str = Field(min_length=1, max_length=32)
    name: str = Field(min_length=1, max_length=200)
    term: str | None = Field(None, max_length=30)


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    term: str | None


class AttendanceMark(BaseModel):
    student_id: int = Field(gt=0)
    attendance_date: date
    status: AttendanceStatus
    notes: str | None = Field(None, max_length=1000)


class AttendanceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    attendance_date: date
    status: AttendanceStatus
    notes: str | None
    recorded_by: str | None
    created_at: datetime
