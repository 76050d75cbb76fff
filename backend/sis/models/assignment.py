"""Assignment ORM - gradable work item within a course.

Invariants:
    - max_points > 0 (enforced by schema and service)
    - published assignments are the only ones visible to upcoming/past-due queries

Design Decisions:
    - grades cascade on delete: an assignment never leaves orphan grades
    - grades is lazy="raise" with passive deletes: queries load grades explicitly,
      the FK ondelete=CASCADE and the service remove them
"""

from datetime import datetime

from sqlalchemy import String, Text, Integer, Float, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis.db.base import Base, TimestampMixin


class Assignment(TimestampMixin, Base):
    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    max_points: Mapped[float] = mapped_column(Float, nullable=False, default=100.0)
    weight: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    term: Mapped[str | None] = mapped_column(String(30), nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    course: Mapped["Course"] = relationship("Course", back_populates="assignments")
    grades: Mapped[list["AssignmentGrade"]] = relationship(
        "AssignmentGrade", back_populates="assignment",
        cascade="all, delete-orphan", lazy="raise", passive_deletes=True,
    )
