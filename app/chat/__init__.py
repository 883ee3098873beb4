"""
Chat app for group and direct messaging.

This app handles:
- Group chat lifecycle (create, rename, delete) and membership changes
- Direct chats between two users
- Text and attachment messages, paginated message history
- Real-time events to chat members over WebSockets

Related apps:
    - authentication: User model for members

WebSocket Support:
    Uses Django Channels for real-time delivery.
    See consumers.py for the WebSocket handler, events.py for the event contract.

Usage:
    from chat.services import ChatService, MessageService

    result = ChatService.create_group("Weekend trip", [u2.id, u3.id], creator=user)

    result = MessageService.send_message(result.data.id, sender=user, content="Hello!")
"""
