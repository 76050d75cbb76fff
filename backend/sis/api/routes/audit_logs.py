"""Audit Log Routes - read-only view of the audit trail, newest first."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from sis.infrastructure.database import get_db
from sis.schemas.audit import AuditLogResponse
from sis.services.audit import AuditService

router = APIRouter(prefix="/api/v1/audit-logs", tags=["audit"])


@router.get("", response_model=list[AuditLogResponse])
async def list_audit_logs(
    entity_type: str | None = Query(None, max_length=50),
    entity_id: str | None = Query(None, max_length=64),
    actor: str | None = Query(None, max_length=64),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    return await AuditService(db).query(entity_type, entity_id, actor, limit)
