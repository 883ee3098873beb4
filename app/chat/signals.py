"""
Django signals for the chat app.

This module defines signal handlers for:
- Handing a deleted user's groups to a random remaining member
- Purging blobs of attachment messages removed with their sender

Related files:
    - apps.py: Signal import in ready()
    - tasks.py: purge_attachment_blobs
    - policy.py: Same random succession used when a creator leaves

Usage:
    Signals are automatically connected when the app is ready.
    See apps.py for the import that triggers connection.
"""

import logging
import random
from functools import partial

from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_delete, pre_delete
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(pre_delete, sender=settings.AUTH_USER_MODEL, dispatch_uid="chat_note_created_groups")
def note_created_groups(sender, instance, **kwargs):
    """
    Remember which groups the user being deleted created.

    The creator column is nulled during the delete itself, so the ids are
    kept on the instance for hand_over_created_groups.
    """
    from chat.models import Chat

    instance._created_group_ids = list(
        Chat.objects.filter(creator=instance, is_group=True).values_list("id", flat=True)
    )


@receiver(post_delete, sender=settings.AUTH_USER_MODEL, dispatch_uid="chat_hand_over_groups")
def hand_over_created_groups(sender, instance, **kwargs):
    """
    Elect a new creator for every group the deleted user created.

    The successor is drawn at random from the remaining members. A group
    with no member left keeps a null creator.

    Args:
        sender: The User model class
        instance: The User instance that was deleted
        **kwargs: Additional signal arguments
    """
    from chat.models import Chat

    group_ids = getattr(instance, "_created_group_ids", [])
    for chat in Chat.objects.filter(id__in=group_ids, creator__isnull=True):
        remaining = chat.member_ids()
        if not remaining:
            logger.info(f"Creator of chat {chat.id} deleted, no member left to succeed")
            continue
        chat.creator_id = random.choice(remaining)
        chat.save()
        logger.info(
            f"Creator of chat {chat.id} deleted, ownership passed to user {chat.creator_id}"
        )


@receiver(pre_delete, sender=settings.AUTH_USER_MODEL, dispatch_uid="chat_purge_sender_blobs")
def purge_sent_attachments(sender, instance, **kwargs):
    """
    Queue blob deletion for attachments the deleted user sent.

    Their messages cascade with the user row, so the blobs are collected
    here and purged once the deletion commits.

    Args:
        sender: The User model class
        instance: The User instance being deleted
        **kwargs: Additional signal arguments
    """
    from chat.models import Attachment

    refs = [
        attachment.as_ref()
        for attachment in Attachment.objects.filter(message__sender=instance).order_by(
            "message_id", "position"
        )
    ]
    if refs:
        transaction.on_commit(partial(_queue_purge, refs, instance.pk))


def _queue_purge(refs: list[dict], user_id: int) -> None:
    from chat.tasks import purge_attachment_blobs

    try:
        purge_attachment_blobs.delay(refs)
    except Exception:
        logger.error(
            f"Could not queue purge of {len(refs)} blobs sent by deleted user {user_id}",
            exc_info=True,
        )
        return
    logger.info(f"Queued purge of {len(refs)} blobs sent by deleted user {user_id}")
