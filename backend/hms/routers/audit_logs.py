"""
Audit log routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from hms.dependencies import get_store
from hms.models.ontology import AuditLog, AuditAction
from hms.services.audit_service import AuditService
from hms.services.store import HotelStore

router = APIRouter(prefix="/audit-logs", tags=["Audit logs"])


@router.get("", response_model=List[AuditLog])
def list_audit_logs(
    entity_id: Optional[str] = None,
    action: Optional[AuditAction] = None,
    entity_type: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    store: HotelStore = Depends(get_store)
):
    """Audit trail, newest first"""
    return AuditService(store).get_logs(entity_id, action, entity_type, limit)
