"""AssignmentGrade ORM - one student's result on one assignment.

Invariants:
    - (assignment_id, student_id) is unique
    - percentage/letter_grade only set when status is GRADED
"""

from datetime import datetime

from sqlalchemy import (
    String, Text, Integer, Float, DateTime, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis.db.base import Base, TimestampMixin


class AssignmentGrade(TimestampMixin, Base):
    __tablename__ = "assignment_grades"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_grade_assignment_student"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False, index=True,
    )
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    letter_grade: Mapped[str | None] = mapped_column(String(2), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    excused_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    graded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    graded_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    assignment: Mapped["Assignment"] = relationship("Assignment", back_populates="grades")
