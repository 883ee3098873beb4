"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Chat management
- Message moderation with inline attachments
"""

from django.contrib import admin

from chat.models import Attachment, Chat, Message


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    """Admin interface for Chat model."""

    list_display = ["id", "name", "is_group", "creator", "created_at", "updated_at"]
    list_filter = ["is_group", "created_at"]
    search_fields = ["name", "id"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["creator"]
    filter_horizontal = ["members"]
    ordering = ["-created_at"]


class AttachmentInline(admin.TabularInline):
    """Inline display of attachments in message admin."""

    model = Attachment
    extra = 0
    readonly_fields = ["position", "public_id", "resource_type", "url"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = ["id", "chat", "sender", "content_preview", "created_at"]
    list_filter = ["created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["chat", "sender"]
    inlines = [AttachmentInline]
    ordering = ["-created_at"]

    @admin.display(description="Content")
    def content_preview(self, obj):
        if not obj.content:
            return "[attachments]"
        return obj.content[:50] + "..." if len(obj.content) > 50 else obj.content
