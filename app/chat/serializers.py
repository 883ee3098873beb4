"""
Serializers for chat API.

Serializer Hierarchy:
    Read:
        UserSummarySerializer: {id, name, avatar} for populated members
        AttachmentSerializer: Blob reference with URL
        MessageSerializer: Message with sender {id, name}, also the
            NEW_MESSAGE event payload
        ChatListSerializer: Requester-relative chat row (other member's
            name/avatar for direct chats)
        GroupListSerializer: Owned group row
        ChatDetailSerializer: Chat with member ids
        ChatPopulatedSerializer: Chat with expanded members

    Write:
        GroupCreateSerializer, DirectChatCreateSerializer, ChatRenameSerializer,
        AddMembersSerializer, MessageCreateSerializer

Design Decisions:
    - Read and write serializers are separate
    - Identifiers in request bodies are accepted as strings and parsed by
      the service layer, so malformed ids surface as invalid_identifier
      errors rather than generic field errors
    - Requester-relative fields read the requester from context["user"]
"""

from __future__ import annotations

from rest_framework import serializers

from chat.constants import MEMBERSHIP_CONFIG
from chat.models import Attachment, Chat, Message


# =============================================================================
# Shared
# =============================================================================


class UserSummarySerializer(serializers.Serializer):
    """Minimal member representation shown inside chats."""

    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    avatar = serializers.CharField(source="avatar_url", read_only=True)


class SenderSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)


# =============================================================================
# Message Serializers
# =============================================================================


class AttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Attachment
        fields = ["public_id", "resource_type", "url"]
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    """
    Display-enriched message.

    The sender's name is denormalized here for clients; it is never
    stored on the message.
    """

    chat = serializers.IntegerField(source="chat_id", read_only=True)
    sender = SenderSerializer(read_only=True)
    attachments = AttachmentSerializer(many=True, read_only=True)

    class Meta:
        model = Message
        fields = ["id", "chat", "sender", "content", "attachments", "created_at"]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    """Validate a text message. Emptiness and length are checked by the service."""

    content = serializers.CharField(allow_blank=True, trim_whitespace=False)


class MessagePageSerializer(serializers.Serializer):
    messages = MessageSerializer(many=True, read_only=True)
    page = serializers.IntegerField(read_only=True)
    total_pages = serializers.IntegerField(read_only=True)


# =============================================================================
# Chat Serializers
# =============================================================================


def _members(chat: Chat) -> list:
    # Uses the prefetch cache when the queryset prefetched members
    return sorted(chat.members.all(), key=lambda member: member.id)


def _other_member(chat: Chat, user):
    return next((member for member in _members(chat) if member.id != user.id), None)


class ChatListSerializer(serializers.ModelSerializer):
    """
    One row of the requester's chat list.

    Direct chats are shown as the other member: their name and avatar.
    Groups show their own name and the first few member avatars.
    """

    name = serializers.SerializerMethodField()
    avatar = serializers.SerializerMethodField()
    members = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = ["id", "is_group", "name", "avatar", "members"]
        read_only_fields = fields

    def _user(self):
        return self.context["user"]

    def get_name(self, chat: Chat) -> str:
        if chat.is_group:
            return chat.name
        other = _other_member(chat, self._user())
        return other.name if other else ""

    def get_avatar(self, chat: Chat) -> list[str]:
        if chat.is_group:
            return [
                member.avatar_url
                for member in _members(chat)[: MEMBERSHIP_CONFIG.GROUP_AVATAR_PREVIEW]
            ]
        other = _other_member(chat, self._user())
        return [other.avatar_url] if other else []

    def get_members(self, chat: Chat) -> list[int]:
        user = self._user()
        return [member.id for member in _members(chat) if member.id != user.id]


class GroupListSerializer(serializers.ModelSerializer):
    avatar = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = ["id", "name", "is_group", "avatar"]
        read_only_fields = fields

    def get_avatar(self, chat: Chat) -> list[str]:
        return [
            member.avatar_url
            for member in _members(chat)[: MEMBERSHIP_CONFIG.GROUP_AVATAR_PREVIEW]
        ]


class ChatDetailSerializer(serializers.ModelSerializer):
    """Chat with member ids."""

    creator = serializers.IntegerField(source="creator_id", read_only=True, allow_null=True)
    members = serializers.SerializerMethodField()

    class Meta:
        model = Chat
        fields = ["id", "name", "is_group", "creator", "members", "created_at", "updated_at"]
        read_only_fields = fields

    def get_members(self, chat: Chat) -> list[int]:
        return [member.id for member in _members(chat)]


class ChatPopulatedSerializer(ChatDetailSerializer):
    """Chat with members expanded to {id, name, avatar}."""

    def get_members(self, chat: Chat) -> list[dict]:
        return UserSummarySerializer(_members(chat), many=True).data


class GroupCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    members = serializers.ListField(child=serializers.CharField(), allow_empty=True)


class DirectChatCreateSerializer(serializers.Serializer):
    user_id = serializers.CharField()


class ChatRenameSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)


class AddMembersSerializer(serializers.Serializer):
    members = serializers.ListField(
        child=serializers.CharField(), allow_empty=True, required=False, default=list
    )
