"""Analytics Types - enums shared by the BI, tracing, collaboration and monitoring stores.

Invariants:
    - All enums are str-valued so they serialize as their names in JSON
    - Permission order: VIEWER < COMMENTER < EDITOR < ADMIN < OWNER
"""

from enum import Enum


# ─── Business intelligence ───────────────────────────────────────

class AnalysisType(str, Enum):
    DESCRIPTIVE = "DESCRIPTIVE"
    DIAGNOSTIC = "DIAGNOSTIC"
    PREDICTIVE = "PREDICTIVE"
    PRESCRIPTIVE = "PRESCRIPTIVE"
    REAL_TIME = "REAL_TIME"


class TimeGranularity(str, Enum):
    MINUTE = "MINUTE"
    HOUR = "HOUR"
    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"
    QUARTER = "QUARTER"
    YEAR = "YEAR"


class AnalysisStatus(str, Enum):
    CREATED = "CREATED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class AlertSeverity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RuleStatistic(str, Enum):
    MEAN = "mean"
    MEDIAN = "median"
    MIN = "min"
    MAX = "max"
    STDDEV = "stddev"


# ─── Tracing ─────────────────────────────────────────────────────

class TracingStatus(str, Enum):
    INITIALIZING = "INITIALIZING"
    ACTIVE = "ACTIVE"


class TraceStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


class SpanKind(str, Enum):
    SERVER = "SERVER"
    CLIENT = "CLIENT"
    PRODUCER = "PRODUCER"
    CONSUMER = "CONSUMER"
    INTERNAL = "INTERNAL"


class SpanStatus(str, Enum):
    UNSET = "UNSET"
    OK = "OK"
    ERROR = "ERROR"


class MetricType(str, Enum):
    COUNTER = "COUNTER"
    GAUGE = "GAUGE"
    HISTOGRAM = "HISTOGRAM"
    SUMMARY = "SUMMARY"


# ─── Collaboration ───────────────────────────────────────────────

class CollaborationType(str, Enum):
    REAL_TIME = "REAL_TIME"
    ASYNCHRONOUS = "ASYNCHRONOUS"
    REVIEW = "REVIEW"
    APPROVAL = "APPROVAL"


class Permission(str, Enum):
    VIEWER = "VIEWER"
    COMMENTER = "COMMENTER"
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"
    OWNER = "OWNER"


CAN_COMMENT = {Permission.COMMENTER, Permission.EDITOR, Permission.ADMIN, Permission.OWNER}
CAN_EDIT = {Permission.EDITOR, Permission.ADMIN, Permission.OWNER}


class CommentType(str, Enum):
    GENERAL = "GENERAL"
    QUESTION = "QUESTION"
    SUGGESTION = "SUGGESTION"
    ISSUE = "ISSUE"
    APPROVAL = "APPROVAL"


class ShareType(str, Enum):
    VIEW = "VIEW"
    COMMENT = "COMMENT"
    EDIT = "EDIT"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class ActivityType(str, Enum):
    SHARED = "SHARED"
    JOINED = "JOINED"
    LEFT = "LEFT"
    COMMENTED = "COMMENTED"
    RESOLVED = "RESOLVED"
    MENTIONED = "MENTIONED"
    VIEWED = "VIEWED"
    EDITED = "EDITED"
    LINK_CREATED = "LINK_CREATED"
    TASK_CREATED = "TASK_CREATED"
    TASK_COMPLETED = "TASK_COMPLETED"
