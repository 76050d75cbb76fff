"""Course ORM - owns assignments; deleting a course cascades to them."""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sis.db.base import Base, TimestampMixin


class Course(TimestampMixin, Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    term: Mapped[str | None] = mapped_column(String(30), nullable=True)

    assignments: Mapped[list["Assignment"]] = relationship(
        "Assignment", back_populates="course",
        cascade="all, delete-orphan", lazy="raise", passive_deletes=True,
    )
