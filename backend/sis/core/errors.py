"""Error Hierarchy - typed, categorized exceptions for all SIS failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Argument errors map to 400/404, workflow state errors to 409, infrastructure to 5xx
    - to_response() produces the single REST error envelope used by every route

Design Decisions:
    - Single hierarchy with SisError base: FastAPI global handler catches all
      (ADR: uniform error shape, routes never build error bodies by hand)
    - code / category / severity / http_status are class attributes; subclasses only
      build the message and fill ErrorContext
    - ErrorContext carries entity_type / entity_id / field into both the response and the logs
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(str, Enum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_type: str | None = None
    entity_id: str | None = None
    field: str | None = None


class SisError(Exception):
    """Base exception for all SIS errors."""

    code = "INTERNAL_ERROR"
    category = ErrorCategory.INTERNAL
    severity = ErrorSeverity.ERROR
    http_status = 500

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        ctx = self.context
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": ctx.timestamp.isoformat(),
                "context": {
                    "entity_type": ctx.entity_type,
                    "entity_id": ctx.entity_id,
                    "field": ctx.field,
                },
            },
        }


# ─── Argument & workflow errors (4xx) ───────────────────────────

class InvalidRequestError(SisError):
    """A body or query argument is out of range or references an unknown row."""

    code = "INVALID_REQUEST"
    category = ErrorCategory.VALIDATION
    http_status = 400

    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(message, context)
        self.context.field = field
        self.field = field


class ResourceNotFoundError(SisError):
    """Path id does not match a stored row (or in-memory analytics entry)."""

    code = "RESOURCE_NOT_FOUND"
    category = ErrorCategory.RESOURCE_NOT_FOUND
    http_status = 404

    def __init__(self, resource_type: str, resource_id: object, context: ErrorContext | None = None):
        super().__init__(f"{resource_type} '{resource_id}' not found", context)
        self.context.entity_type = resource_type
        self.context.entity_id = str(resource_id)
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidStateError(SisError):
    """Operation not allowed in the entity's current workflow state."""

    code = "INVALID_STATE"
    category = ErrorCategory.BUSINESS_RULE
    http_status = 409


class DuplicateResourceError(SisError):
    code = "DUPLICATE_RESOURCE"
    category = ErrorCategory.CONFLICT
    http_status = 409

    def __init__(self, resource_type: str, key: str, context: ErrorContext | None = None):
        super().__init__(f"{resource_type} already exists: {key}", context)
        self.context.entity_type = resource_type


class FeatureDisabledError(SisError):
    code = "FEATURE_DISABLED"
    category = ErrorCategory.BUSINESS_RULE
    severity = ErrorSeverity.WARNING
    http_status = 409

    def __init__(self, feature: str, context: ErrorContext | None = None):
        super().__init__(f"{feature} is disabled", context)
        self.feature = feature


# ─── Infrastructure errors (5xx) ────────────────────────────────

class ReportGenerationError(SisError):
    """Rendering a report document failed."""

    code = "REPORT_GENERATION_FAILED"
    severity = ErrorSeverity.CRITICAL

    def __init__(self, report_type: str, message: str, context: ErrorContext | None = None):
        super().__init__(f"Failed to generate {report_type} report: {message}", context)
        self.report_type = report_type


class DatabaseError(SisError):
    """Database unreachable or a statement failed; readiness probes report the same condition."""

    code = "DATABASE_ERROR"
    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.CRITICAL
    http_status = 503

    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(f"Database {operation} failed: {message}", context)
        self.operation = operation
