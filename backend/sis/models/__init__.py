"""ORM Models - SQLAlchemy declarative models for all persisted SIS entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Integer autoincrement primary keys; enums stored as their string values

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs, and Base.metadata is complete for create_all
"""

from sis.models.student import Student  # noqa: F401
from sis.models.staff_user import StaffUser  # noqa: F401
from sis.models.course import Course  # noqa: F401
from sis.models.assignment import Assignment  # noqa: F401
from sis.models.assignment_grade import AssignmentGrade  # noqa: F401
from sis.models.attendance_record import AttendanceRecord  # noqa: F401
from sis.models.pre_registration import PreRegistration  # noqa: F401
from sis.models.re_enrollment import ReEnrollment  # noqa: F401
from sis.models.audit_log import AuditLog  # noqa: F401
from sis.models.report_history import ReportHistory  # noqa: F401
