"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Group membership limits
- Attachment batch limits
- Message feed paging and content limits
- Real-time event names and channel group naming

Import example:
    from chat.constants import MEMBERSHIP_CONFIG, REALTIME_CONFIG
"""

from typing import Final


# =============================================================================
# Membership Configuration
# =============================================================================


class MEMBERSHIP_CONFIG:
    """Group chat size limits."""

    MIN_GROUP_MEMBERS: Final[int] = 3
    MAX_GROUP_MEMBERS: Final[int] = 100

    # Avatars shown for a group in chat listings
    GROUP_AVATAR_PREVIEW: Final[int] = 3


# =============================================================================
# Attachment Configuration
# =============================================================================


class ATTACHMENT_CONFIG:
    """Configuration for message attachments."""

    MAX_ATTACHMENTS_PER_MESSAGE: Final[int] = 5

    # Storage prefix for uploaded blobs
    UPLOAD_PREFIX: Final[str] = "chat/attachments"

    # Blob upload/delete worker threads per request
    STORAGE_WORKERS: Final[int] = 4

    # Media resource_type values; any other upload is stored as RAW_RESOURCE_TYPE
    MEDIA_RESOURCE_TYPES: Final[tuple] = ("image", "video", "audio")
    RAW_RESOURCE_TYPE: Final[str] = "raw"


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    PAGE_SIZE: Final[int] = 20
    MAX_CONTENT_LENGTH: Final[int] = 10000  # Characters


# =============================================================================
# Real-time Configuration
# =============================================================================


class REALTIME_CONFIG:
    """Event wire names and channel layer naming."""

    ALERT: Final[str] = "ALERT"
    REFETCH_CHATS: Final[str] = "REFETCH_CHATS"
    NEW_MESSAGE: Final[str] = "NEW_MESSAGE"
    NEW_MESSAGE_ALERT: Final[str] = "NEW_MESSAGE_ALERT"

    # Per-user channel group: f"{USER_GROUP_PREFIX}{user_id}"
    USER_GROUP_PREFIX: Final[str] = "chat_user_"

    # Channel layer message type, dispatched to consumer.chat_event()
    CHANNEL_MESSAGE_TYPE: Final[str] = "chat.event"
