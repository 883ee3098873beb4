"""
Celery tasks for chat app.

This module defines async tasks for:
- Broadcasting chat events to the recipients' channel layer groups
- Purging attachment blobs that could not be deleted together with their chat

Related files:
    - events.py: ChannelLayerEmitter queues broadcast_chat_event
    - services.py: ChatService.delete queues purge_attachment_blobs
    - storage.py: BlobStorage used to delete the blobs

Usage:
    from chat.tasks import broadcast_chat_event, purge_attachment_blobs

    broadcast_chat_event.delay("REFETCH_CHATS", [1, 2], None)
    purge_attachment_blobs.delay([{"public_id": "...", "resource_type": "image"}])
"""

import logging

from celery import shared_task

from chat.events import ChannelLayerEmitter
from chat.storage import get_default_storage
from core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def broadcast_chat_event(self, event: str, recipient_ids: list[int], payload=None) -> int:
    """
    Send one chat event to every recipient's channel layer group.

    Recipients whose group_send failed are retried on their own with
    exponential backoff, so recipients already reached never get a
    duplicate event.

    Args:
        event: Wire name (ALERT, REFETCH_CHATS, NEW_MESSAGE, NEW_MESSAGE_ALERT)
        recipient_ids: User ids to deliver to
        payload: JSON-serializable event payload, or None

    Returns:
        Number of recipients reached in this attempt
    """
    failed = ChannelLayerEmitter().deliver(event, recipient_ids, payload)

    if failed:
        logger.warning(
            f"Broadcast attempt {self.request.retries + 1} of {event}: "
            f"{len(failed)}/{len(recipient_ids)} recipients unreachable"
        )
        raise self.retry(
            args=(event, failed, payload),
            exc=ExternalServiceError(
                "Chat event could not be delivered",
                error_code="EVENT_DELIVERY_FAILED",
                details={"event": event, "user_ids": failed},
            ),
            countdown=2 ** self.request.retries,
        )

    return len(recipient_ids)


@shared_task(
    bind=True,
    autoretry_for=(ExternalServiceError,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 5},
)
def purge_attachment_blobs(self, refs: list[dict]) -> int:
    """
    Delete orphaned attachment blobs.

    Retried with exponential backoff while any blob still fails to delete.
    Deleting an already-deleted blob is a no-op for the storage backends
    in use, so a retry may safely resend the whole batch.

    Args:
        refs: Blob references ({"public_id", "resource_type"})

    Returns:
        Number of blobs deleted
    """
    if not refs:
        return 0

    failed = get_default_storage().delete(refs)
    deleted = len(refs) - len(failed)

    if failed:
        logger.warning(
            f"Purge attempt {self.request.retries + 1}: "
            f"{len(failed)}/{len(refs)} blobs still not deleted"
        )
        raise ExternalServiceError(
            "Attachment blobs could not be deleted",
            error_code="BLOB_PURGE_FAILED",
            details={"public_ids": [ref.get("public_id") for ref in failed]},
        )

    logger.info(f"Purged {deleted} orphaned attachment blobs")
    return deleted
