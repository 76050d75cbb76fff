"""Audit Schemas - read model for the audit trail."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from sis.core.domain_types import AuditAction, AuditSeverity


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: AuditAction
    entity_type: str
    entity_id: str | None
    actor: str
    details: dict | None
    success: bool
    severity: AuditSeverity
    created_at: datetime
