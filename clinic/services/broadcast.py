import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

from clinic.realtime.consumers import QUEUE_GROUP

logger = logging.getLogger(__name__)


def queue_changed(reason: str, entry_id=None) -> None:
    """Tell connected queue screens to refetch."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    event = {
        "type": "queue.changed",
        "reason": reason,
        "entryId": entry_id,
        "ts": timezone.now().isoformat(),
    }
    try:
        async_to_sync(channel_layer.group_send)(QUEUE_GROUP, event)
    except Exception:
        # A missing Redis must not fail the write that triggered the event.
        logger.warning("queue broadcast failed for %s", reason, exc_info=True)
