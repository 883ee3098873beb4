"""
Chat application configuration.

This app provides the chat system with:
- Direct (1:1) and group chats
- Creator-controlled group membership with random succession
- Attachment messages backed by blob storage
- Real-time events over Django Channels
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"

    def ready(self):
        """
        Import signals when the app is ready.

        This ensures signal handlers are connected when Django starts.
        """
        from chat import signals  # noqa: F401
