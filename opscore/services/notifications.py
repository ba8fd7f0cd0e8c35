import logging
import uuid

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def tenant_group(tenant_id) -> str:
    return f"tenant.{uuid.UUID(str(tenant_id)).hex}"


def notify_tenant(tenant_id, payload: dict) -> None:
    """Push ``payload`` to every socket subscribed to the tenant's group.

    ``payload['type']`` selects the consumer handler (``shift.archived`` ->
    ``shift_archived``).  Delivery is best effort.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    try:
        async_to_sync(channel_layer.group_send)(tenant_group(tenant_id), payload)
    except Exception:
        logger.warning('failed to publish %s to tenant %s', payload.get('type'), tenant_id, exc_info=True)
