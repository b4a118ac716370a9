from typing import Optional, Any, Dict

from coordination.models import AuditEvent


def log_action(*, actor, action: str, object_type: Optional[str]=None, object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    return AuditEvent.objects.create(
        actor_id=getattr(actor, 'id', '') or '',
        actor_email=getattr(actor, 'email', '') or '',
        action=action,
        object_type=object_type, object_id=object_id,
        detail=detail or {},
    )
