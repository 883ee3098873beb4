"""
Chat system models.

This module defines the data models for the chat system supporting:
- Direct (1:1) chats between exactly two users
- Group chats of 3-100 members with a single creator

Models:
    Chat: Container for messages, holds the member set and creator
    Message: A text and/or attachment message posted to a chat
    Attachment: One stored blob referenced by a message, in upload order

Design Decisions:
    - Membership is a plain many-to-many on Chat; the service layer enforces
      group size limits and creator rules (see chat.policy)
    - Direct chats never have a creator
    - Messages only store references (sender id, blob ids); display data
      such as the sender's name is resolved at read time
    - Deleting a Chat cascades to its Messages and their Attachments; the
      blobs themselves are deleted by the service layer
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import BaseModel


class Chat(BaseModel):
    """
    A direct or group chat.

    Fields:
        name: Group display name (unused for direct chats)
        is_group: True for group chats
        creator: Group member with elevated privileges (null for direct chats)
        members: Users taking part in the chat

    Relationships:
        messages: All Message records for this chat
    """

    name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Group chat name (empty for direct chats)",
    )
    is_group = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether this is a group chat",
    )
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_chats",
        help_text="Group creator (null for direct chats)",
    )
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="chats",
        help_text="Users taking part in this chat",
    )

    class Meta:
        ordering = ["-updated_at"]
        verbose_name = "chat"
        verbose_name_plural = "chats"

    def __str__(self) -> str:
        if self.is_group:
            return f"Group: {self.name}"
        return f"Direct chat {self.pk}"

    def member_ids(self) -> list[int]:
        """Return member ids ordered by id."""
        return list(self.members.order_by("id").values_list("id", flat=True))

    def is_member(self, user_id: int) -> bool:
        return self.members.filter(id=user_id).exists()


class Message(BaseModel):
    """
    A message posted to a chat.

    A message always has non-empty content or at least one attachment.

    Fields:
        chat: Owning chat
        sender: Member who posted the message
        content: Text content (empty for attachment-only messages)

    Relationships:
        attachments: Attachment records ordered by position
    """

    chat = models.ForeignKey(
        Chat,
        on_delete=models.CASCADE,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_messages",
    )
    content = models.TextField(
        blank=True,
        help_text="Message text (may be empty when attachments are present)",
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["chat", "-created_at"], name="chat_msg_chat_created_idx"),
        ]

    def __str__(self) -> str:
        preview = self.content[:30] if self.content else "[attachments]"
        return f"Message {self.pk} in chat {self.chat_id}: {preview}"


class Attachment(models.Model):
    """
    A blob in object storage attached to a message.

    Fields:
        message: Owning message
        position: Zero-based index within the message's attachment list
        public_id: Storage reference used for deletion
        resource_type: image, video, audio or raw
        url: Public URL of the blob
    """

    class ResourceType(models.TextChoices):
        IMAGE = "image", "Image"
        VIDEO = "video", "Video"
        AUDIO = "audio", "Audio"
        RAW = "raw", "Raw"

    message = models.ForeignKey(
        Message,
        on_delete=models.CASCADE,
        related_name="attachments",
    )
    position = models.PositiveSmallIntegerField(default=0)
    public_id = models.CharField(max_length=500)
    resource_type = models.CharField(
        max_length=10,
        choices=ResourceType.choices,
        default=ResourceType.RAW,
    )
    url = models.CharField(max_length=1000)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(
                fields=["message", "position"],
                name="chat_attachment_unique_position",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.resource_type}:{self.public_id}"

    def as_ref(self) -> dict[str, str]:
        """Storage reference accepted by BlobStorage.delete()."""
        return {"public_id": self.public_id, "resource_type": self.resource_type}
