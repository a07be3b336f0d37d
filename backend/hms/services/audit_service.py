"""
Audit service - append-only operation trail
Every successful mutation records exactly one entry, after the mutation is committed.
"""
import json
import logging
from typing import List, Optional, Any

from hms.config import settings
from hms.models.ontology import AuditLog, AuditAction
from hms.services.store import HotelStore

logger = logging.getLogger(__name__)


def snapshot(value: Any) -> Optional[str]:
    """JSON snapshot for previous_value / new_value"""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if hasattr(value, "model_dump"):
        value = value.model_dump(mode="json")
    return json.dumps(value, default=str, ensure_ascii=False)


class AuditService:
    """Audit log writer and reader"""

    def __init__(self, store: HotelStore):
        self.store = store

    def record(
        self,
        action: AuditAction,
        entity_type: str,
        entity_id: str,
        description: str,
        operator: Optional[str] = None,
        reason: Optional[str] = None,
        previous_value: Any = None,
        new_value: Any = None,
    ) -> AuditLog:
        log = self.store.add_audit_log({
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "description": description,
            "reason": reason,
            "previous_value": snapshot(previous_value),
            "new_value": snapshot(new_value),
            "created_by": operator or settings.DEFAULT_OPERATOR,
        })
        logger.info(f"Audit {action.value} on {entity_type} {entity_id} by {log.created_by}")
        return log

    def get_logs(
        self,
        entity_id: Optional[str] = None,
        action: Optional[AuditAction] = None,
        entity_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[AuditLog]:
        """Newest first, optionally filtered"""
        logs = self.store.get_audit_logs()
        if entity_id:
            logs = [log for log in logs if log.entity_id == entity_id]
        if action:
            logs = [log for log in logs if log.action == action]
        if entity_type:
            logs = [log for log in logs if log.entity_type == entity_type]
        if limit:
            logs = logs[:limit]
        return logs
