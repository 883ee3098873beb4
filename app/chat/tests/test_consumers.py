"""
Tests for the chat events WebSocket.

The consumer is driven through channels' WebsocketCommunicator, wrapped in
JWTAuthMiddleware as in config/asgi.py. The async scenarios run through
async_to_sync so the suite needs no async test plugin; consumer database
calls run in the test thread, hence transaction=True.

Verifies:
- Unauthenticated and invalid-token connections are rejected with 4001
- Channel layer chat.event messages reach the user's socket
- Text messages can be sent over the socket
"""

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from rest_framework_simplejwt.tokens import AccessToken

from chat.consumers import ChatEventsConsumer
from chat.events import user_group_name
from chat.middleware import JWTAuthMiddleware
from chat.models import Message
from chat.tests.fakes import RecordingEmitter

pytestmark = pytest.mark.django_db(transaction=True)


def communicator_for(user=None, token=None):
    application = JWTAuthMiddleware(ChatEventsConsumer.as_asgi())
    if user is not None:
        token = str(AccessToken.for_user(user))
    path = "/ws/chat/events/"
    if token:
        path = f"{path}?token={token}"
    return WebsocketCommunicator(application, path)


# =============================================================================
# TestConnection
# =============================================================================


class TestConnection:
    """
    Tests for connecting to ws/chat/events/.

    Verifies:
    - A valid access token is required
    """

    def test_anonymous_connection_is_rejected(self):
        async def scenario():
            communicator = communicator_for()
            connected, code = await communicator.connect()
            return connected, code

        connected, code = async_to_sync(scenario)()

        assert connected is False
        assert code == 4001

    def test_invalid_token_is_rejected(self):
        async def scenario():
            communicator = communicator_for(token="not-a-jwt")
            connected, _ = await communicator.connect()
            return connected

        assert async_to_sync(scenario)() is False

    def test_inactive_user_is_rejected(self, alice):
        alice.is_active = False
        alice.save()

        async def scenario():
            communicator = communicator_for(alice)
            connected, _ = await communicator.connect()
            return connected

        assert async_to_sync(scenario)() is False

    def test_subprotocol_token_is_accepted(self, alice):
        """
        A token sent as `jwt, <token>` is answered with the "jwt" subprotocol.

        Why it matters: Browsers close a socket whose handshake does not
        echo one of the subprotocols they offered.
        """

        async def scenario():
            application = JWTAuthMiddleware(ChatEventsConsumer.as_asgi())
            communicator = WebsocketCommunicator(
                application,
                "/ws/chat/events/",
                subprotocols=["jwt", str(AccessToken.for_user(alice))],
            )
            connected, subprotocol = await communicator.connect()
            await communicator.disconnect()
            return connected, subprotocol

        assert async_to_sync(scenario)() == (True, "jwt")

    def test_query_token_accepts_without_subprotocol(self, alice):
        async def scenario():
            communicator = communicator_for(alice)
            connected, subprotocol = await communicator.connect()
            await communicator.disconnect()
            return connected, subprotocol

        assert async_to_sync(scenario)() == (True, None)


# =============================================================================
# TestEventDelivery
# =============================================================================


class TestEventDelivery:
    """
    Tests for delivering chat events to a connected user.

    Verifies:
    - chat.event messages sent to the user's group are forwarded
    """

    def test_group_event_reaches_socket(self, alice):
        """
        Whatever ChannelLayerEmitter sends to the user's group arrives.

        Why it matters: This is the last hop of every real-time event.
        """

        async def scenario():
            communicator = communicator_for(alice)
            await communicator.connect()
            await get_channel_layer().group_send(
                user_group_name(alice.id),
                {
                    "type": "chat.event",
                    "event": "ALERT",
                    "payload": {"message": "Welcome to Team group", "chat_id": 1},
                },
            )
            received = await communicator.receive_json_from(timeout=2)
            await communicator.disconnect()
            return received

        assert async_to_sync(scenario)() == {
            "event": "ALERT",
            "payload": {"message": "Welcome to Team group", "chat_id": 1},
        }

    def test_refetch_event_has_null_payload(self, alice):
        async def scenario():
            communicator = communicator_for(alice)
            await communicator.connect()
            await get_channel_layer().group_send(
                user_group_name(alice.id),
                {"type": "chat.event", "event": "REFETCH_CHATS", "payload": None},
            )
            received = await communicator.receive_json_from(timeout=2)
            await communicator.disconnect()
            return received

        assert async_to_sync(scenario)() == {"event": "REFETCH_CHATS", "payload": None}


# =============================================================================
# TestSendingMessages
# =============================================================================


class TestSendingMessages:
    """
    Tests for {"type": "message"} frames.

    Verifies:
    - Members get an acknowledgement and the message is stored
    - Failures come back as error frames
    """

    def _exchange(self, user, frame):
        async def scenario():
            communicator = communicator_for(user)
            await communicator.connect()
            await communicator.send_json_to(frame)
            reply = await communicator.receive_json_from(timeout=2)
            await communicator.disconnect()
            return reply

        return async_to_sync(scenario)()

    def test_member_sends_message(self, group, alice):
        reply = self._exchange(alice, {"type": "message", "chat_id": group.id, "content": "hi"})

        message = Message.objects.get(chat=group)
        assert reply == {"type": "message_sent", "message_id": message.id, "chat_id": group.id}
        assert message.content == "hi"
        assert [event.event for event in RecordingEmitter.log] == ["NEW_MESSAGE", "NEW_MESSAGE_ALERT"]

    def test_non_member_gets_error_frame(self, group, outsider):
        reply = self._exchange(outsider, {"type": "message", "chat_id": group.id, "content": "hi"})

        assert reply["type"] == "error"
        assert reply["error_code"] == "NOT_CHAT_MEMBER"
        assert not Message.objects.exists()

    def test_unknown_frame_type(self, alice):
        reply = self._exchange(alice, {"type": "typing"})

        assert reply == {
            "type": "error",
            "error": "Unknown message type: typing",
            "error_code": "UNKNOWN_MESSAGE_TYPE",
        }
