"""Append-only audit trail of staff actions."""
from typing import Any, Optional

from clinic.models import AuditEvent


def log_action(*, user, action: str, object_type: Optional[str] = None,
               object_id: Optional[int] = None, detail: Optional[dict[str, Any]] = None) -> AuditEvent:
    """Record ``action``.  Anonymous or unsaved users are stored as NULL."""
    actor = user if getattr(user, 'pk', None) else None
    return AuditEvent.objects.create(
        user=actor,
        action=action,
        object_type=object_type,
        object_id=object_id,
        detail=detail or {},
    )
