import logging
from typing import Optional, Any, Dict

from django.db import transaction

from opscore.models import AuditEvent

logger = logging.getLogger(__name__)


def log_action(*, ctx=None, tenant_id=None, user_id: Optional[int] = None, action: str,
               object_type: Optional[str] = None, object_id: Any = None,
               detail: Optional[Dict[str, Any]] = None) -> Optional[AuditEvent]:
    """Append an audit event.  Never lets an audit failure break the caller."""
    if ctx is not None:
        tenant_id = tenant_id or ctx.tenant_id
        user_id = user_id or ctx.user_id
    try:
        with transaction.atomic():
            return AuditEvent.objects.create(
                tenant_id=tenant_id,
                user_id=user_id,
                action=action,
                object_type=object_type,
                object_id=str(object_id) if object_id is not None else None,
                detail=detail or {},
            )
    except Exception:
        logger.exception('failed to write audit event action=%s object=%s:%s', action, object_type, object_id)
        return None
