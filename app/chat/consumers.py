"""
WebSocket consumers for the chat application.

Consumers:
    ChatEventsConsumer: One connection per user session; receives every
        chat event addressed to that user and accepts outgoing messages

Authentication:
    Users are authenticated via JWT token passed as query parameter or as
    the `jwt, <token>` subprotocol pair (answered with the "jwt" subprotocol).
    JWTAuthMiddleware attaches the user to self.scope["user"].

Channel Groups:
    Each user has a channel group named "chat_user_{user_id}" (see
    chat.events.user_group_name). ChannelLayerEmitter sends `chat.event`
    messages to these groups.

Message Types (from client):
    - message: {"type": "message", "chat_id": 1, "content": "Hello!"}

Message Types (to client):
    - {"event": "ALERT" | "REFETCH_CHATS" | "NEW_MESSAGE" | "NEW_MESSAGE_ALERT",
       "payload": {...} | null}
    - {"type": "message_sent", "message_id": 1, "chat_id": 1}
    - {"type": "error", "error": str, "error_code": str}
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.contrib.auth.models import AnonymousUser

from chat.events import user_group_name
from chat.services import MessageService

logger = logging.getLogger(__name__)


class ChatEventsConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer delivering chat events to one user.

    Attributes:
        group_name: Channel layer group of the connected user
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.group_name: str | None = None

    async def connect(self):
        """Reject anonymous connections, otherwise join the user's group."""
        user = self.scope.get("user")

        if not user or isinstance(user, AnonymousUser):
            logger.warning("Rejected unauthenticated chat events connection")
            await self.close(code=4001)
            return

        self.group_name = user_group_name(user.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        # The accepted subprotocol must be one the client offered
        if "jwt" in self.scope.get("subprotocols", []):
            await self.accept(subprotocol="jwt")
        else:
            await self.accept()
        logger.info(f"User {user.id} connected to chat events")

    async def disconnect(self, close_code):
        if self.group_name:
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
            logger.info(f"User {self.scope['user'].id} disconnected from chat events")

    async def receive_json(self, content):
        """
        Handle incoming WebSocket messages.

        Expected message format:
            {"type": "message", "chat_id": 1, "content": "Hello!"}
        """
        message_type = content.get("type")

        if message_type == "message":
            await self._handle_message(content)
        else:
            await self.send_json(
                {
                    "type": "error",
                    "error": f"Unknown message type: {message_type}",
                    "error_code": "UNKNOWN_MESSAGE_TYPE",
                }
            )

    async def _handle_message(self, content):
        """
        Post a text message through MessageService.

        The service emits NEW_MESSAGE to all members, including this
        connection, so only an acknowledgement is sent back here.
        """
        result = await self._send_message(content.get("chat_id"), content.get("content", ""))

        if not result["success"]:
            await self.send_json(
                {
                    "type": "error",
                    "error": result["error"],
                    "error_code": result["error_code"],
                }
            )
            return

        await self.send_json(
            {
                "type": "message_sent",
                "message_id": result["message_id"],
                "chat_id": result["chat_id"],
            }
        )

    async def chat_event(self, event):
        """Handle chat.event messages from the channel layer."""
        await self.send_json(
            {
                "event": event["event"],
                "payload": event.get("payload"),
            }
        )

    @database_sync_to_async
    def _send_message(self, chat_id, text) -> dict:
        result = MessageService.send_message(chat_id, self.scope["user"], text)
        if result.success:
            return {
                "success": True,
                "message_id": result.data.id,
                "chat_id": result.data.chat_id,
            }
        return {
            "success": False,
            "error": result.error,
            "error_code": result.error_code,
        }
