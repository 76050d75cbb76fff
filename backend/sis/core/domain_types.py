"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - Identity types wrap int primary keys; never mix a StudentId with a StaffId
    - All valid states encoded as Enums - no raw string matching
    - Workflow "pending" sets are defined once here and reused by services

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders and store as plain strings
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

StudentId = NewType("StudentId", int)
StaffId = NewType("StaffId", int)
CourseId = NewType("CourseId", int)
AssignmentId = NewType("AssignmentId", int)
GradeId = NewType("GradeId", int)


# ─── Constants ───────────────────────────────────────────────────

DEFAULT_ACTOR = "system"
NEEDS_ATTENTION_DAYS = 7
MAX_ACTIVITY_FEED = 1000
MAX_HISTORY_POINTS = 1000


# ─── Reference Data ──────────────────────────────────────────────

class StaffRole(str, Enum):
    TEACHER = "TEACHER"
    COUNSELOR = "COUNSELOR"
    PRINCIPAL = "PRINCIPAL"
    REGISTRAR = "REGISTRAR"
    ADMIN = "ADMIN"


class AttendanceStatus(str, Enum):
    """Daily attendance mark for one student."""
    PRESENT = "PRESENT"
    TARDY = "TARDY"
    ABSENT = "ABSENT"
    EXCUSED_ABSENT = "EXCUSED_ABSENT"
    UNEXCUSED_ABSENT = "UNEXCUSED_ABSENT"
    UNMARKED = "UNMARKED"


# ─── Grading ─────────────────────────────────────────────────────

class GradeStatus(str, Enum):
    PENDING = "PENDING"
    GRADED = "GRADED"
    MISSING = "MISSING"
    EXCUSED = "EXCUSED"


# ─── Reports ─────────────────────────────────────────────────────

class ReportFormat(str, Enum):
    """Export format; value is the query-string spelling, extension via ReportFormat.extension."""
    EXCEL = "excel"
    PDF = "pdf"
    CSV = "csv"

    @property
    def extension(self) -> str:
        return {"excel": "xlsx", "pdf": "pdf", "csv": "csv"}[self.value]

    @property
    def media_type(self) -> str:
        return {
            "excel": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            "pdf": "application/pdf",
            "csv": "text/csv",
        }[self.value]


class ReportType(str, Enum):
    DAILY = "DAILY"
    SUMMARY = "SUMMARY"
    CHRONIC_ABSENTEEISM = "CHRONIC_ABSENTEEISM"
    BATCH = "BATCH"


class ReportStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


# ─── Audit ───────────────────────────────────────────────────────

class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    VIEW = "VIEW"
    EXPORT = "EXPORT"
    STATUS_CHANGE = "STATUS_CHANGE"


class AuditSeverity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ─── Pre-registration ────────────────────────────────────────────

class PreRegistrationStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


# ─── Re-enrollment ───────────────────────────────────────────────

class ReEnrollmentStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_REVIEW = "PENDING_REVIEW"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    ENROLLED = "ENROLLED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


PENDING_RE_ENROLLMENT_STATUSES = (
    ReEnrollmentStatus.DRAFT,
    ReEnrollmentStatus.PENDING_REVIEW,
    ReEnrollmentStatus.PENDING_APPROVAL,
    ReEnrollmentStatus.APPROVED,
)


class WithdrawalReason(str, Enum):
    TRANSFERRED = "TRANSFERRED"
    MOVED = "MOVED"
    HOMESCHOOL = "HOMESCHOOL"
    PRIVATE_SCHOOL = "PRIVATE_SCHOOL"
    EXPELLED = "EXPELLED"
    DROPPED_OUT = "DROPPED_OUT"
    GRADUATED = "GRADUATED"
    OTHER = "OTHER"


class EnrollmentDecision(str, Enum):
    APPROVED = "APPROVED"
    CONDITIONAL = "CONDITIONAL"
    DENIED = "DENIED"
