"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/events/ - Per-user event stream (ALERT, REFETCH_CHATS,
                      NEW_MESSAGE, NEW_MESSAGE_ALERT) plus message sending

Authentication:
    JWT token should be passed as query parameter: ?token=<jwt_access_token>
    JWTAuthMiddleware validates the token and attaches the user to the
    consumer's scope.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path(
        "ws/chat/events/",
        consumers.ChatEventsConsumer.as_asgi(),
    ),
]
