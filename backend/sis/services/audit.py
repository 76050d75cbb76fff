"""Audit Service - records who did what to which entity, in the caller's transaction.

Invariants:
    - log() only adds to the session; the caller's commit persists it with the audited change
    - ERROR / CRITICAL entries also go to the application log at WARNING
    - Queries are newest first and capped by limit

Design Decisions:
    - Same-session write: an audit row never exists for a rolled-back change
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sis.core.domain_types import AuditAction, AuditSeverity
from sis.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

_ESCALATED = {AuditSeverity.ERROR, AuditSeverity.CRITICAL}


class AuditService:
    """Append-only audit trail."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def log(
        self,
        action: AuditAction,
        entity_type: str,
        entity_id: object | None,
        actor: str,
        details: dict | None = None,
        success: bool = True,
        severity: AuditSeverity = AuditSeverity.INFO,
    ) -> AuditLog:
        entry = AuditLog(
            action=action.value,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            actor=actor,
            details=details,
            success=success,
            severity=severity.value,
        )
        self.db.add(entry)
        if severity in _ESCALATED:
            logger.warning(
                f"Audit {severity.value}: {action.value} {entity_type} {entity_id}",
                extra={
                    "action": action.value, "entity_type": entity_type,
                    "entity_id": entry.entity_id, "actor": actor,
                },
            )
        return entry

    async def query(
        self,
        entity_type: str | None = None,
        entity_id: str | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[AuditLog]:
        stmt = select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        if entity_type:
            stmt = stmt.where(AuditLog.entity_type == entity_type)
        if entity_id:
            stmt = stmt.where(AuditLog.entity_id == entity_id)
        if actor:
            stmt = stmt.where(AuditLog.actor == actor)
        result = await self.db.execute(stmt.limit(limit))
        return list(result.scalars().all())
