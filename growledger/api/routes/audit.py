"""Audit trail endpoints (read-only)."""

from fastapi import APIRouter, Depends

from growledger.api.dependencies import get_audit
from growledger.application.dto.responses import AuditListResponse, AuditRecordResponse
from growledger.core.entities.audit import AuditAction
from growledger.core.services import AuditTrail

router = APIRouter(prefix="/api/audit", tags=["audit"])


@router.get("", response_model=AuditListResponse)
async def list_audit_records(
    action: AuditAction | None = None,
    limit: int = 1000,
    offset: int = 0,
    audit: AuditTrail = Depends(get_audit),
) -> AuditListResponse:
    """All audit rows oldest first, optionally filtered by action."""
    records = await audit.list_records(action=action, limit=limit, offset=offset)
    return AuditListResponse(
        records=[AuditRecordResponse.from_entity(r) for r in records],
        total=len(records),
    )


@router.get("/consumption", response_model=AuditListResponse)
async def consumption_rows(
    limit: int = 1000,
    offset: int = 0,
    audit: AuditTrail = Depends(get_audit),
) -> AuditListResponse:
    """Consume-only rows for consumption exports."""
    records = await audit.consumption_rows(limit=limit, offset=offset)
    return AuditListResponse(
        records=[AuditRecordResponse.from_entity(r) for r in records],
        total=len(records),
    )
